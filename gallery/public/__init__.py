"""
Public Blueprint

The gallery page and raw image delivery, open to every visitor.
"""

from flask import Blueprint

public_bp = Blueprint('public', __name__)

from gallery.public import routes  # noqa: E402, F401
