"""
Gallery Exceptions

Validation problems are shown to the admin as flash messages, missing
images become 404s, and storage failures are logged and reported with a
generic message.
"""


class GalleryError(Exception):
    """Base class for gallery errors."""


class UploadValidationError(GalleryError):
    """The uploaded file was rejected. The message is safe to show to the user."""


class ImageNotFound(GalleryError):
    """No image exists for the given identifier."""

    def __init__(self, image_id):
        super().__init__(f'Image not found: {image_id!r}')
        self.image_id = image_id


class StorageError(GalleryError):
    """The database or upload directory failed while reading or writing an image."""
