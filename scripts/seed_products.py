#!/usr/bin/env python3
"""Seed product documents script.

Writes the products of a JSON seed file into the Firestore product
collection. Existing documents are merged, not replaced. Images are
not uploaded; put them under the Storage folder named after each
product's productID.

Usage:
    python scripts/seed_products.py
    python scripts/seed_products.py --file my_products.json --collection kaaykoproducts
    python scripts/seed_products.py --dry-run
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from kaayko.domain.exceptions import RemoteUnavailableError
from kaayko.infrastructure.config import settings
from kaayko.infrastructure.firestore_store import FirestoreProductStore
from kaayko.infrastructure.memory_store import DEFAULT_SEED_FILE, load_seed


async def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Seed the Firestore product collection from a JSON file",
    )
    parser.add_argument(
        "--file",
        default=str(DEFAULT_SEED_FILE),
        help="Seed file (default: bundled sample catalog)",
    )
    parser.add_argument(
        "--collection",
        default=settings.products_collection,
        help=f"Target collection (default: {settings.products_collection})",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the documents without writing them",
    )

    args = parser.parse_args()

    print("=" * 60)
    print("Kaayko Product Seeder")
    print("=" * 60)
    print(f"File: {args.file}")
    print(f"Collection: {args.collection}")
    print()

    seed_store, _ = load_seed(args.file, settings.image_namespace)
    documents = seed_store.snapshot()

    for document in documents:
        print(f"  - {document.id}: {document.data.get('title', '')}")
    print()

    if args.dry_run:
        print(f"Dry run: {len(documents)} documents not written.")
        return 0

    store = FirestoreProductStore.from_settings(settings)
    store.collection_name = args.collection
    try:
        written = await store.upsert_documents(documents)
    except RemoteUnavailableError as e:
        print(f"  ✗ Error: {e.message}")
        return 1

    print(f"  ✓ Written: {written} documents")
    print()
    print("=" * 60)
    print("Seeding complete!")
    print("=" * 60)
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
