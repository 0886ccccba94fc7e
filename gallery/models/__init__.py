"""
Models Package

Exports all models for easy importing.
"""

from gallery.models.admin import Admin
from gallery.models.image import Image
from gallery.models.session import StoredSession

__all__ = ['Admin', 'Image', 'StoredSession']
