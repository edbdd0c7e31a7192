"""
Custom validators shared by the property serializers.
"""

from django.core.exceptions import ValidationError
from django.utils import timezone

MAX_IMAGE_SIZE = 5 * 1024 * 1024
MAX_IMAGES_PER_PROPERTY = 10
VALID_IMAGE_EXTENSIONS = ['jpg', 'jpeg', 'png', 'webp']
VALID_IMAGE_CONTENT_TYPES = ['image/jpeg', 'image/png', 'image/webp']
MIN_YEAR_BUILT = 1800


def validate_property_image(image, position=None):
    """
    Validate a single uploaded property image.

    Checks:
    - File size (max 5MB)
    - File format (jpg, jpeg, png, webp)
    - MIME type, when the client sent one

    Args:
        image: UploadedFile object
        position: 1-based index used in error messages

    Raises:
        ValidationError: If image is invalid
    """
    label = f'Image {position}' if position is not None else 'Image'

    if image.size > MAX_IMAGE_SIZE:
        raise ValidationError(
            f'{label} exceeds maximum size of 5MB. '
            f'Current size: {image.size / (1024 * 1024):.2f}MB',
            code='image_too_large'
        )

    file_name = (image.name or '').lower()
    if not any(file_name.endswith(f'.{ext}') for ext in VALID_IMAGE_EXTENSIONS):
        raise ValidationError(
            f'{label} has invalid format. '
            f'Allowed formats: {", ".join(VALID_IMAGE_EXTENSIONS)}',
            code='invalid_image_format'
        )

    content_type = getattr(image, 'content_type', None)
    if content_type and content_type not in VALID_IMAGE_CONTENT_TYPES:
        raise ValidationError(
            f'{label} has invalid content type: {content_type}',
            code='invalid_content_type'
        )


def validate_year_built(value):
    """
    Validate a construction year lies between 1800 and the current year.

    Raises:
        ValidationError: If the year is out of range
    """
    current_year = timezone.now().year
    if value < MIN_YEAR_BUILT or value > current_year:
        raise ValidationError(
            f'Year built must be between {MIN_YEAR_BUILT} and {current_year}.',
            code='invalid_year_built'
        )
