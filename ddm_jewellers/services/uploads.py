import logging

from cloudinary.exceptions import Error as CloudinaryError

from ddm_jewellers.core.imports import cloudinary, current_app
from ddm_jewellers.core.errors import ValidationFailed, ExternalServiceError, ServiceUnavailable

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_EXTENSIONS = {"png", "jpg", "jpeg", "gif", "webp"}
ALLOWED_DESIGN_EXTENSIONS = ALLOWED_IMAGE_EXTENSIONS | {"pdf"}


def allowed_file(filename, extensions=ALLOWED_IMAGE_EXTENSIONS):
    return "." in filename and filename.rsplit(".", 1)[1].lower() in extensions


def file_size(file):
    file.stream.seek(0, 2)
    size = file.stream.tell()
    file.stream.seek(0)
    return size


def upload_file(file, folder, extensions=ALLOWED_IMAGE_EXTENSIONS, max_bytes=None, resource_type="image"):
    """Send an uploaded file to Cloudinary and return the stored asset's secure URL."""
    if file is None or file.filename == "":
        raise ValidationFailed("No file uploaded")
    if not allowed_file(file.filename, extensions):
        raise ValidationFailed("Invalid file type")
    max_bytes = max_bytes or current_app.config.get("MAX_IMAGE_BYTES")
    if max_bytes and file_size(file) > max_bytes:
        raise ValidationFailed("File too large")
    if not current_app.config.get("CLOUDINARY_CLOUD_NAME"):
        raise ServiceUnavailable("File storage is not configured")

    try:
        result = cloudinary.uploader.upload(file, folder=folder, resource_type=resource_type)
    except CloudinaryError as e:
        logger.error(f"Cloudinary upload to {folder} failed: {e}")
        raise ExternalServiceError("Upload failed")
    return result["secure_url"]
