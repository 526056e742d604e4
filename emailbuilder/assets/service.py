"""Image uploads scoped to a per-user namespace in the blob store."""

import logging
import uuid
from dataclasses import asdict, dataclass

from emailbuilder.assets.blob_store import BlobStore
from emailbuilder.errors import Forbidden, InvalidInput

logger = logging.getLogger(__name__)

MAX_IMAGE_BYTES = 2 * 1024 * 1024  # 2MB

# MIME type -> (file extension, reported format)
ALLOWED_IMAGE_TYPES = {
    "image/jpeg": (".jpg", "jpg"),
    "image/png": (".png", "png"),
    "image/gif": (".gif", "gif"),
    "image/webp": (".webp", "webp"),
}


@dataclass(frozen=True)
class AssetRef:
    """Reference returned to the client after an upload."""

    public_id: str
    url: str
    format: str
    size: int

    def to_dict(self) -> dict:
        return asdict(self)


class ImageAssetService:
    """Validates and stores user images; only the owner may delete them."""

    def __init__(
        self,
        blob_store: BlobStore,
        namespace: str = "emailbuilder",
        max_bytes: int = MAX_IMAGE_BYTES,
    ) -> None:
        self.blob_store = blob_store
        self.namespace = namespace.strip("/")
        self.max_bytes = max_bytes

    def owner_prefix(self, owner_id: str) -> str:
        return f"{self.namespace}/{owner_id}/"

    def upload(self, owner_id: str, content_type: str | None, data: bytes | None) -> AssetRef:
        """Store an image under the owner's namespace.

        Raises:
            InvalidInput: Empty file, file over the size limit, or a type
                outside JPEG/PNG/GIF/WEBP.
        """
        if not data:
            raise InvalidInput("No files were uploaded.", detail="Please select an image to upload.")

        if len(data) > self.max_bytes:
            raise InvalidInput("File size too large", detail="Maximum file size is 2MB")

        media_type = (content_type or "").split(";")[0].strip().lower()
        if media_type not in ALLOWED_IMAGE_TYPES:
            raise InvalidInput("Invalid file type", detail="Supported formats: JPEG, PNG, GIF, WEBP")

        extension, fmt = ALLOWED_IMAGE_TYPES[media_type]
        key = f"{self.owner_prefix(owner_id)}{uuid.uuid4().hex}{extension}"
        stored = self.blob_store.put(key, data, media_type)
        logger.info(f"Stored image {key} for user {owner_id}")
        return AssetRef(public_id=stored.key, url=stored.url, format=fmt, size=stored.size)

    def delete(self, owner_id: str, public_id: str | None) -> dict:
        """Delete an owned image. Deleting a missing image is not an error.

        Returns:
            ``{"result": "ok"}`` or ``{"result": "not found"}``.

        Raises:
            InvalidInput: No id given.
            Forbidden: The id is outside the requester's namespace.
        """
        if not public_id:
            raise InvalidInput(
                "Public ID is required",
                detail="Please provide the public_id of the image to delete",
            )

        if not public_id.startswith(self.owner_prefix(owner_id)):
            raise Forbidden("Access denied", detail="You can only delete your own images")

        existed = self.blob_store.delete(public_id)
        if not existed:
            logger.info(f"Image {public_id} already absent")
            return {"result": "not found"}
        logger.info(f"Deleted image {public_id}")
        return {"result": "ok"}
