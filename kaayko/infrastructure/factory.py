"""Remote store selection.

Builds the document store and image source named by the settings.
"""

import structlog

from kaayko.infrastructure.config import Settings
from kaayko.infrastructure.firestore_store import FirestoreProductStore
from kaayko.infrastructure.image_client import StorageImageClient
from kaayko.infrastructure.memory_store import load_seed
from kaayko.infrastructure.store import ImageSource, ProductStore

logger = structlog.get_logger()


def build_remote_store(settings: Settings) -> tuple[ProductStore, ImageSource]:
    """Create the configured product store and image source.

    Args:
        settings: Application settings.

    Returns:
        Document store and image source.
    """
    logger.info("Building remote store", backend=settings.store_backend)
    if settings.store_backend == "memory":
        return load_seed(settings.seed_file, settings.image_namespace)
    return (
        FirestoreProductStore.from_settings(settings),
        StorageImageClient.from_settings(settings),
    )
