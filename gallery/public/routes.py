"""
Public Routes

Gallery page and raw image delivery.
"""

import logging
from flask import Response, abort, render_template, send_file
from gallery.errors import ImageNotFound, StorageError
from gallery.public import public_bp
from gallery.services import get_image_store

logger = logging.getLogger(__name__)


@public_bp.route('/')
def index():
    """Gallery of every image, newest first"""
    try:
        images = get_image_store().list()
    except StorageError:
        logger.exception('Could not list images for the gallery')
        images = []
    return render_template('gallery/index.html', images=images)


@public_bp.route('/imagem/<image_id>')
def image(image_id):
    """Raw image bytes with their stored content type"""
    try:
        stored = get_image_store().get(image_id)
    except ImageNotFound:
        abort(404)

    if stored.path:
        return send_file(stored.path, mimetype=stored.mime_type)
    return Response(stored.data, mimetype=stored.mime_type)
