"""Image upload/delete routes."""

from fastapi import APIRouter, File, UploadFile

from emailbuilder.api.dependencies import CurrentUser, Images
from emailbuilder.api.schemas import DeleteImageResponse, UploadResponse
from emailbuilder.errors import InvalidInput

router = APIRouter()


@router.post("/upload", response_model=UploadResponse)
def upload_image(
    current_user: CurrentUser,
    images: Images,
    image: UploadFile | None = File(default=None),
):
    """Upload an image (form field ``image``) into the user's folder."""
    if image is None:
        raise InvalidInput("No files were uploaded.", detail="Please select an image to upload.")

    # One byte past the limit is enough to reject oversized files
    data = image.file.read(images.max_bytes + 1)
    image.file.close()

    asset = images.upload(current_user.id, image.content_type, data)
    return {"message": "Image uploaded successfully", "image": asset.to_dict()}


@router.delete("/images/{public_id:path}", response_model=DeleteImageResponse)
def delete_image(
    public_id: str,
    current_user: CurrentUser,
    images: Images,
):
    """Delete an owned image. Already-deleted images are reported, not rejected."""
    result = images.delete(current_user.id, public_id)
    if result["result"] == "ok":
        return {"message": "Image deleted successfully", "detail": result}
    return {
        "message": "Image already deleted or does not exist",
        "detail": result,
    }
