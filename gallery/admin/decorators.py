"""
Admin Decorators

Gates for the management routes: an authenticated admin session, and for
state-changing requests a matching single-use CSRF token.
"""

import logging
from functools import wraps
from flask import request, redirect, url_for
from flask_login import current_user
from gallery.services.session import CSRF_FORM_FIELD, consume_csrf_token, set_flash

logger = logging.getLogger(__name__)

CSRF_FAILURE_MESSAGE = 'Invalid or expired action. Please try again.'


def admin_required(f):
    """Redirect to the login page unless the session belongs to the admin."""
    @wraps(f)
    def wrapper(*args, **kwargs):
        if not current_user.is_authenticated:
            return redirect(url_for('auth.login'))
        return f(*args, **kwargs)
    return wrapper


def csrf_required(f):
    """Consume the session's CSRF token and refuse the action if it does not match.

    The token is cleared whatever the outcome, so each form render allows
    exactly one submission.
    """
    @wraps(f)
    def wrapper(*args, **kwargs):
        if not consume_csrf_token(request.form.get(CSRF_FORM_FIELD)):
            logger.warning('Blocked %s %s: missing or invalid CSRF token', request.method, request.path)
            set_flash('error', CSRF_FAILURE_MESSAGE)
            return redirect(url_for('admin.dashboard'))
        return f(*args, **kwargs)
    return wrapper
