"""
Services Package

Exports all services for easy importing.
"""

from gallery.services.credentials import authenticate, verify, ensure_admin, hash_password
from gallery.services.validation import validate_upload, ImageInfo
from gallery.services.storage import (
    ImageStore, DatabaseImageStore, FilesystemImageStore, StoredImage,
    create_image_store, init_image_store, get_image_store
)

__all__ = [
    'authenticate',
    'verify',
    'ensure_admin',
    'hash_password',
    'validate_upload',
    'ImageInfo',
    'ImageStore',
    'DatabaseImageStore',
    'FilesystemImageStore',
    'StoredImage',
    'create_image_store',
    'init_image_store',
    'get_image_store'
]
