"""Infrastructure layer.

Configuration, logging and the remote store adapters.
"""
