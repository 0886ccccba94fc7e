"""
Session Manager

Helpers over the current request's server-side session: admin login and
logout, one-shot flash messages and single-use CSRF tokens.
"""

import hmac
import logging
import secrets

from flask import flash, get_flashed_messages, session
from flask_login import login_user, logout_user

logger = logging.getLogger(__name__)

CSRF_SESSION_KEY = 'csrf_token'
CSRF_FORM_FIELD = 'csrf_token'
FLASH_KINDS = ('error', 'success')


def start_session():
    """Return the session of the current request.

    The session interface creates an unauthenticated record for browsers
    without a valid cookie, so this never returns None inside a request.
    """
    return session


def login(admin):
    """Mark the session as logged in for ``admin``.

    The session id is rotated first so an id planted before login is
    useless afterwards.
    """
    session.regenerate()
    login_user(admin)
    session['username'] = admin.email
    logger.info('Admin %s logged in', admin.email)


def logout():
    """Log out and destroy the session record; the cookie is expired on the response."""
    username = session.get('username')
    logout_user()
    session.destroy()
    logger.info('Admin %s logged out', username)


def set_flash(kind, message):
    """Queue a one-shot message of ``kind`` ('error' or 'success')."""
    if kind not in FLASH_KINDS:
        raise ValueError(f'Unknown flash kind: {kind}')
    flash(message, kind)


def consume_flash(kind):
    """Return the latest pending message of ``kind`` and clear it, or None."""
    messages = get_flashed_messages(category_filter=[kind])
    return messages[-1] if messages else None


def issue_csrf_token():
    """Generate a fresh token, replacing any unused one, and return it."""
    token = secrets.token_hex(32)
    session[CSRF_SESSION_KEY] = token
    return token


def consume_csrf_token(submitted):
    """Check ``submitted`` against the stored token. The stored token is always cleared."""
    stored = session.pop(CSRF_SESSION_KEY, None)
    if not submitted or not stored:
        return False
    return hmac.compare_digest(str(submitted).encode('utf-8'), stored.encode('utf-8'))
