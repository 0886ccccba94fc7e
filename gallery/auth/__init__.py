"""
Auth Blueprint

Login and logout for the administrator account.
"""

from flask import Blueprint

auth_bp = Blueprint('auth', __name__)

from gallery.auth import routes  # noqa: E402, F401
