"""Image asset storage."""

from emailbuilder.assets.blob_store import BlobStore, LocalBlobStore, S3BlobStore, StoredObject
from emailbuilder.assets.service import AssetRef, ImageAssetService, MAX_IMAGE_BYTES

__all__ = [
    "BlobStore",
    "LocalBlobStore",
    "S3BlobStore",
    "StoredObject",
    "AssetRef",
    "ImageAssetService",
    "MAX_IMAGE_BYTES",
]
