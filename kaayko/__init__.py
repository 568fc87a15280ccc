"""Kaayko store backend.

Keeps the product catalog in sync with the Firestore collection and the
Firebase Storage image folders, and holds the shopper's in-memory cart.
"""

__version__ = "0.1.0"
