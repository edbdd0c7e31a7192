"""
Cloudinary client used to host property images.

Images are stored under the configured folder, resized to 1200x800 and
delivered as progressive WebP. Each stored image is identified by the
``public_id`` Cloudinary returns, which is what ``destroy_image`` needs to
release it again.
"""

import logging

import cloudinary
import cloudinary.exceptions
import cloudinary.uploader
from django.conf import settings

from .exceptions import MediaServiceError
from .validators import VALID_IMAGE_EXTENSIONS

logger = logging.getLogger(__name__)

PROPERTY_IMAGE_TRANSFORMATION = [
    {
        'width': 1200,
        'height': 800,
        'crop': 'fill',
        'quality': 'auto',
        'fetch_format': 'auto',
        'flags': 'progressive',
    }
]


def configure():
    """Apply the Cloudinary credentials from Django settings."""
    cloudinary.config(
        cloud_name=settings.CLOUDINARY_CLOUD_NAME,
        api_key=settings.CLOUDINARY_API_KEY,
        api_secret=settings.CLOUDINARY_API_SECRET,
        secure=True,
    )


def upload_image(image_file):
    """
    Upload one property image.

    Args:
        image_file: Django UploadedFile

    Returns:
        dict: {'url': <secure url>, 'public_id': <cloudinary id>}

    Raises:
        MediaServiceError: If Cloudinary rejects or fails the upload
    """
    configure()
    try:
        result = cloudinary.uploader.upload(
            image_file,
            folder=settings.CLOUDINARY_FOLDER,
            allowed_formats=VALID_IMAGE_EXTENSIONS,
            transformation=PROPERTY_IMAGE_TRANSFORMATION,
            format='webp',
            resource_type='image',
        )
    except cloudinary.exceptions.Error as e:
        logger.error(f"Cloudinary upload failed for {getattr(image_file, 'name', 'image')}: {e}")
        raise MediaServiceError() from e

    return {
        'url': result['secure_url'],
        'public_id': result['public_id'],
    }


def upload_images(image_files):
    """
    Upload several images, releasing the ones already stored if a later
    upload fails.

    Returns:
        list[dict]: One {'url', 'public_id'} entry per file, in order
    """
    uploaded = []
    try:
        for image_file in image_files:
            uploaded.append(upload_image(image_file))
    except Exception:
        destroy_images(item['public_id'] for item in uploaded)
        raise
    return uploaded


def destroy_image(public_id):
    """
    Release a stored image.

    Failures are logged and reported through the return value; the database
    change that made the image obsolete has already committed by the time
    this runs.

    Returns:
        bool: True if Cloudinary confirmed the deletion
    """
    configure()
    try:
        result = cloudinary.uploader.destroy(
            public_id,
            resource_type='image',
            invalidate=True,
        )
    except cloudinary.exceptions.Error:
        logger.exception(f"Cloudinary destroy failed for {public_id}")
        return False

    if result.get('result') != 'ok':
        logger.warning(f"Cloudinary did not delete {public_id}: {result.get('result')}")
        return False

    logger.info(f"Released image {public_id}")
    return True


def destroy_images(public_ids):
    """Release every image in ``public_ids``."""
    for public_id in public_ids:
        destroy_image(public_id)
