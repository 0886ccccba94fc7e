"""
Upload Validation

Screens an uploaded file before anything is persisted: size ceiling, mime
allow-list, then the real pixel dimensions read from the decoded bytes.
"""

import io
import logging
import threading
from dataclasses import dataclass

from flask import current_app
from PIL import Image, UnidentifiedImageError

from gallery.config import Config
from gallery.errors import UploadValidationError

logger = logging.getLogger(__name__)

MIME_ALIASES = {'image/jpg': 'image/jpeg', 'image/pjpeg': 'image/jpeg'}
PIL_FORMAT_MIME_TYPES = {'JPEG': 'image/jpeg', 'PNG': 'image/png'}

# Image.MAX_IMAGE_PIXELS is process-wide; header parses swap it under this lock
_header_lock = threading.Lock()


@dataclass(frozen=True)
class ImageInfo:
    """What the decoder found in an accepted upload."""
    width: int
    height: int
    mime_type: str


def _limits():
    try:
        config = current_app.config
    except RuntimeError:
        config = {}
    return (
        config.get('MAX_UPLOAD_BYTES', Config.MAX_UPLOAD_BYTES),
        config.get('MAX_IMAGE_DIMENSION', Config.MAX_IMAGE_DIMENSION),
        tuple(config.get('ALLOWED_MIME_TYPES', Config.ALLOWED_MIME_TYPES)),
    )


def _open_header(data):
    """Open ``data`` lazily without Pillow's decompression bomb check.

    Only the header is parsed here; the caller rejects large dimensions
    before any pixel data is touched.
    """
    with _header_lock:
        previous = Image.MAX_IMAGE_PIXELS
        Image.MAX_IMAGE_PIXELS = None
        try:
            return Image.open(io.BytesIO(data))
        finally:
            Image.MAX_IMAGE_PIXELS = previous


def normalize_mime_type(mime_type):
    mime_type = (mime_type or '').split(';', 1)[0].strip().lower()
    return MIME_ALIASES.get(mime_type, mime_type)


def format_size_limit(limit):
    return f'{limit // (1024 * 1024)}MB'


def validate_upload(data, declared_mime, declared_size=None):
    """Validate an uploaded image and return its :class:`ImageInfo`.

    Checks run in order and stop at the first failure:

    1. size (``declared_size``, or ``len(data)`` when not given)
    2. declared mime type against the allow-list
    3. decoded format and dimensions, read from the header
    4. integrity of the rest of the file

    Raises:
        UploadValidationError: with a message meant for the user
    """
    max_bytes, max_dimension, allowed = _limits()
    size = len(data) if declared_size is None else declared_size

    if size > max_bytes:
        raise UploadValidationError(
            f'The file is too large. The limit is {format_size_limit(max_bytes)}.')

    if normalize_mime_type(declared_mime) not in allowed:
        raise UploadValidationError('Invalid format. Only JPG and PNG images are allowed.')

    try:
        image = _open_header(data)
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as e:
        logger.info('Rejected unreadable upload: %s', e)
        raise UploadValidationError('The image is corrupt or unreadable.') from e

    with image:
        width, height = image.size
        mime_type = PIL_FORMAT_MIME_TYPES.get(image.format)
        if mime_type is None or mime_type not in allowed:
            raise UploadValidationError('The image is corrupt or unreadable.')

        if width > max_dimension or height > max_dimension:
            raise UploadValidationError(
                f'Resolution too high ({width}x{height}px). '
                f'The maximum allowed is {max_dimension}px.')

        try:
            image.verify()
        except (OSError, SyntaxError, ValueError) as e:
            logger.info('Rejected unreadable upload: %s', e)
            raise UploadValidationError('The image is corrupt or unreadable.') from e

    return ImageInfo(width=width, height=height, mime_type=mime_type)
