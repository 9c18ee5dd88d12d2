import logging
import os
import uuid
from io import BytesIO

from PIL import Image, ImageOps, UnidentifiedImageError
from vercel_blob import put

logger = logging.getLogger(__name__)


class ImageProcessingError(Exception):
    pass


def fit_square(uploaded_file, size):
    """Crop and resize an uploaded image to a size x size square; returns JPEG bytes."""
    if hasattr(uploaded_file, "seek"):
        uploaded_file.seek(0)
    try:
        with Image.open(uploaded_file) as img:
            img = ImageOps.exif_transpose(img)
            fitted = ImageOps.fit(img.convert("RGB"), (size, size), Image.Resampling.LANCZOS)
    except (UnidentifiedImageError, OSError) as e:
        raise ImageProcessingError(f"Not a valid image: {e}") from e

    buffer = BytesIO()
    fitted.save(buffer, format="JPEG", quality=90)
    return buffer.getvalue()


def store_image(folder, uploaded_file, size):
    """Fit the upload to a square and push it to blob storage. Returns the public URL."""
    data = fit_square(uploaded_file, size)
    stem = os.path.splitext(getattr(uploaded_file, "name", "") or "image")[0]
    path = f"{folder}/{stem}-{uuid.uuid4().hex[:8]}.jpg"
    blob = put(path, data, options={"allowOverwrite": True})
    logger.info(f"Stored image {path} ({size}x{size})")
    return blob["url"]
