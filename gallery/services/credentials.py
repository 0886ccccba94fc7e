"""
Credential Store

One administrator account, stored in the admins table with a salted
pbkdf2 hash. Verification always runs a hash comparison, also for unknown
emails, so timing does not reveal which part of the login was wrong.
"""

import logging

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.security import check_password_hash, generate_password_hash

from gallery.extensions import db
from gallery.models import Admin

logger = logging.getLogger(__name__)

_dummy_hashes = {}


def _dummy_hash():
    """Hash checked for unknown emails, built with the same method as real ones."""
    method = current_app.config['PASSWORD_HASH_METHOD']
    if method not in _dummy_hashes:
        _dummy_hashes[method] = generate_password_hash('not-a-real-password', method=method)
    return _dummy_hashes[method]


def hash_password(password):
    """Hash a password with the configured method."""
    return generate_password_hash(password, method=current_app.config['PASSWORD_HASH_METHOD'])


def authenticate(email, password):
    """Return the Admin matching ``email`` and ``password``, or None.

    Never raises for an unknown account; a blank email or password is
    treated like a mismatch.
    """
    email = (email or '').strip()
    if not email or not password:
        return None

    admin = Admin.query.filter_by(email=email).first()
    if admin is None:
        check_password_hash(_dummy_hash(), password)
        return None

    if check_password_hash(admin.password_hash, password):
        return admin
    return None


def verify(email, password):
    """Boolean form of :func:`authenticate`."""
    return authenticate(email, password) is not None


def ensure_admin(email, password):
    """Create the admin account if it does not exist yet.

    Existing rows are never modified. Returns the admin (new or existing),
    or None when no seed credentials are configured.
    """
    email = (email or '').strip()
    if not email or not password:
        logger.info('ADMIN_EMAIL or ADMIN_PASSWORD not set; admin account not provisioned')
        return None

    admin = Admin.query.filter_by(email=email).first()
    if admin is not None:
        logger.info('Admin account %s already exists', email)
        return admin

    admin = Admin(email=email, password_hash=hash_password(password))
    try:
        db.session.add(admin)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception('Could not create admin account %s', email)
        raise
    logger.info('Admin account %s created', email)
    return admin
