"""
Admin Routes

Image management. Every route needs the admin session; upload and delete
also consume the CSRF token issued by the dashboard render.
"""

import logging
from flask import render_template, request, redirect, url_for, session
from gallery.admin import admin_bp
from gallery.admin.decorators import admin_required, csrf_required
from gallery.errors import StorageError, UploadValidationError
from gallery.services import get_image_store, validate_upload
from gallery.services.session import consume_flash, issue_csrf_token, set_flash

logger = logging.getLogger(__name__)


@admin_bp.route('/admin')
@admin_required
def dashboard():
    """Management view: image list, pending flashes and a fresh CSRF token."""
    error = consume_flash('error')
    success = consume_flash('success')
    csrf_token = issue_csrf_token()

    try:
        images = get_image_store().list()
    except StorageError:
        logger.exception('Could not list images for the admin view')
        images = []
        error = error or 'Could not load the image list.'

    return render_template('admin/dashboard.html',
                           images=images,
                           error=error,
                           success=success,
                           csrf_token=csrf_token,
                           admin_username=session.get('username', 'Admin'))


@admin_bp.route('/upload', methods=['POST'])
@admin_required
@csrf_required
def upload():
    """Validate the `image` field and store it."""
    file = request.files.get('image')
    if file is None or not file.filename:
        set_flash('error', 'Please select an image to upload.')
        return redirect(url_for('admin.dashboard'))

    data = file.read()
    try:
        info = validate_upload(data, file.mimetype, len(data))
    except UploadValidationError as e:
        logger.info('Rejected upload %r: %s', file.filename, e)
        set_flash('error', str(e))
        return redirect(url_for('admin.dashboard'))

    try:
        image = get_image_store().save(file.filename, info.mime_type, data)
    except StorageError:
        logger.exception('Could not store upload %r', file.filename)
        set_flash('error', 'Internal error while saving the image.')
        return redirect(url_for('admin.dashboard'))

    logger.info('Upload %r accepted as %s (%dx%d)', file.filename, image.id, info.width, info.height)
    set_flash('success', 'Image uploaded successfully!')
    return redirect(url_for('admin.dashboard'))


@admin_bp.route('/delete', methods=['POST'])
@admin_required
@csrf_required
def delete():
    """Delete the image named by `image_id`. Already-deleted images are not an error."""
    image_id = request.form.get('image_id', '').strip()

    try:
        removed = get_image_store().delete(image_id)
    except StorageError:
        logger.exception('Could not delete image %r', image_id)
        set_flash('error', 'Internal error while deleting the image.')
        return redirect(url_for('admin.dashboard'))

    if removed:
        set_flash('success', 'Image deleted successfully.')
    else:
        set_flash('success', 'The image had already been deleted.')
    return redirect(url_for('admin.dashboard'))
