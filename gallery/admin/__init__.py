"""
Admin Blueprint

Image management for the logged-in administrator: listing, upload and
delete. State-changing routes also require a single-use CSRF token.
"""

from flask import Blueprint

admin_bp = Blueprint('admin', __name__)

from gallery.admin import routes  # noqa: E402, F401
