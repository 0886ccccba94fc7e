"""
Auth Routes

Administrator login and logout.
"""

import logging
from flask import render_template, request, redirect, url_for
from flask_login import current_user
from gallery.admin.decorators import admin_required
from gallery.auth import auth_bp
from gallery.services import authenticate
from gallery.services import session as session_manager

logger = logging.getLogger(__name__)

LOGIN_FAILURE_MESSAGE = 'Incorrect email or password.'


@auth_bp.route('/login', methods=['GET', 'POST'])
def login():
    """Login form and credential check."""
    if current_user.is_authenticated:
        return redirect(url_for('admin.dashboard'))

    if request.method == 'POST':
        email = request.form.get('email', '').strip()
        password = request.form.get('password', '')

        admin = authenticate(email, password)
        if admin is None:
            logger.warning('Failed admin login for %r from %s', email, request.remote_addr)
            session_manager.set_flash('error', LOGIN_FAILURE_MESSAGE)
            return redirect(url_for('auth.login'))

        session_manager.login(admin)
        return redirect(url_for('admin.dashboard'))

    return render_template('auth/login.html', error=session_manager.consume_flash('error'))


@auth_bp.route('/logout')
@admin_required
def logout():
    """Destroy the session and send the browser back to the gallery."""
    session_manager.logout()
    return redirect(url_for('public.index'))
