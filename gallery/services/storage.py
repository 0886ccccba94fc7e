"""
Image Storage

One interface, two backends:

- DatabaseImageStore keeps the bytes in the images table (ids are
  autoincrement integers).
- FilesystemImageStore writes ``<uploadTimestampMillis>.<ext>`` files into
  UPLOAD_FOLDER (ids are those file names).

The backend is picked by STORAGE_BACKEND when the app is created.
"""

import logging
import os
import re
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from gallery.errors import ImageNotFound, StorageError
from gallery.extensions import db
from gallery.models import Image

logger = logging.getLogger(__name__)

EXTENSIONS = {'image/jpeg': 'jpg', 'image/png': 'png'}
MIME_TYPES = {ext: mime for mime, ext in EXTENSIONS.items()}
FILENAME_PATTERN = re.compile(r'(\d+)\.(jpg|png)')


def _now_millis():
    return int(time.time() * 1000)


@dataclass
class StoredImage:
    """An image as returned by a store.

    ``data`` is set by the database backend on :meth:`ImageStore.get`,
    ``path`` by the filesystem backend.
    """
    id: object
    original_name: str
    mime_type: str
    uploaded_at: datetime
    data: bytes = None
    path: str = None


class ImageStore(ABC):
    """Persistence for uploaded images."""

    @abstractmethod
    def list(self):
        """Return every image (metadata only), newest first."""

    @abstractmethod
    def get(self, image_id):
        """Return the full image or raise ImageNotFound."""

    @abstractmethod
    def save(self, original_name, mime_type, data):
        """Persist an accepted upload and return it."""

    @abstractmethod
    def delete(self, image_id):
        """Remove an image. Returns False if it was already gone."""


class DatabaseImageStore(ImageStore):
    """Images as blobs in the images table."""

    @staticmethod
    def _parse_id(image_id):
        try:
            return int(image_id)
        except (TypeError, ValueError):
            return None

    def list(self):
        try:
            rows = db.session.query(Image.id, Image.original_name, Image.mime_type, Image.uploaded_at)\
                .order_by(Image.uploaded_at.desc(), Image.id.desc()).all()
        except SQLAlchemyError as e:
            raise StorageError('Could not list images') from e
        return [StoredImage(id=row.id, original_name=row.original_name,
                            mime_type=row.mime_type, uploaded_at=row.uploaded_at)
                for row in rows]

    def get(self, image_id):
        pk = self._parse_id(image_id)
        if pk is None:
            raise ImageNotFound(image_id)
        try:
            image = db.session.get(Image, pk)
        except SQLAlchemyError as e:
            raise StorageError(f'Could not load image {pk}') from e
        if image is None:
            raise ImageNotFound(image_id)
        return StoredImage(id=image.id, original_name=image.original_name,
                           mime_type=image.mime_type, uploaded_at=image.uploaded_at,
                           data=image.data)

    def save(self, original_name, mime_type, data):
        image = Image(original_name=original_name, mime_type=mime_type,
                      data=data, uploaded_at=datetime.utcnow())
        try:
            db.session.add(image)
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise StorageError('Could not save image') from e
        logger.info('Stored image %s (%s, %d bytes)', image.id, original_name, len(data))
        return StoredImage(id=image.id, original_name=image.original_name,
                           mime_type=image.mime_type, uploaded_at=image.uploaded_at)

    def delete(self, image_id):
        pk = self._parse_id(image_id)
        if pk is None:
            return False
        try:
            deleted = Image.query.filter_by(id=pk).delete()
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise StorageError(f'Could not delete image {pk}') from e
        if deleted:
            logger.info('Deleted image %s', pk)
        return bool(deleted)


class FilesystemImageStore(ImageStore):
    """Images as files named after their upload time."""

    def __init__(self, directory):
        self.directory = os.path.abspath(directory)
        os.makedirs(self.directory, exist_ok=True)

    def _resolve(self, image_id):
        """Map an id to a path inside the upload directory, or None.

        Only bare ``<digits>.<ext>`` names are accepted, so separators and
        ``..`` segments never reach the filesystem.
        """
        name = str(image_id or '')
        match = FILENAME_PATTERN.fullmatch(name)
        if match is None or os.path.basename(name) != name:
            return None, None
        return os.path.join(self.directory, name), match

    @staticmethod
    def _to_stored(name, match, path=None):
        millis, ext = match.groups()
        return StoredImage(id=name, original_name=name, mime_type=MIME_TYPES[ext],
                           uploaded_at=datetime.utcfromtimestamp(int(millis) / 1000),
                           path=path)

    def list(self):
        try:
            names = os.listdir(self.directory)
        except OSError as e:
            raise StorageError(f'Could not read {self.directory}') from e
        images = []
        for name in names:
            match = FILENAME_PATTERN.fullmatch(name)
            if match and os.path.isfile(os.path.join(self.directory, name)):
                images.append((int(match.group(1)), self._to_stored(name, match)))
        images.sort(key=lambda item: item[0], reverse=True)
        return [image for _, image in images]

    def get(self, image_id):
        path, match = self._resolve(image_id)
        if path is None or not os.path.isfile(path):
            raise ImageNotFound(image_id)
        return self._to_stored(match.string, match, path=path)

    def save(self, original_name, mime_type, data):
        ext = EXTENSIONS.get(mime_type)
        if ext is None:
            raise StorageError(f'Unsupported mime type {mime_type}')

        millis = _now_millis()
        while True:
            name = f'{millis}.{ext}'
            path = os.path.join(self.directory, name)
            try:
                handle = open(path, 'xb')
            except FileExistsError:
                millis += 1
                continue
            except OSError as e:
                raise StorageError(f'Could not create {path}') from e
            break

        try:
            with handle:
                handle.write(data)
        except OSError as e:
            self._remove_quietly(path)
            raise StorageError(f'Could not write {path}') from e

        logger.info('Stored image %s (%s, %d bytes)', name, original_name, len(data))
        return self._to_stored(name, FILENAME_PATTERN.fullmatch(name), path=path)

    def delete(self, image_id):
        path, _ = self._resolve(image_id)
        if path is None:
            logger.warning('Refused to delete invalid image id %r', image_id)
            return False
        try:
            os.remove(path)
        except FileNotFoundError:
            logger.info('Image %s already removed', image_id)
            return False
        except OSError as e:
            raise StorageError(f'Could not delete {path}') from e
        logger.info('Deleted image %s', image_id)
        return True

    @staticmethod
    def _remove_quietly(path):
        try:
            os.remove(path)
        except OSError:
            logger.warning('Could not remove partial file %s', path)


def create_image_store(config):
    """Build the store selected by STORAGE_BACKEND."""
    backend = config.get('STORAGE_BACKEND', 'database')
    if backend == 'database':
        return DatabaseImageStore()
    if backend == 'filesystem':
        return FilesystemImageStore(config['UPLOAD_FOLDER'])
    raise ValueError(f'Unknown STORAGE_BACKEND: {backend!r}')


def init_image_store(app):
    app.extensions['image_store'] = create_image_store(app.config)
    logger.info('Image storage backend: %s', app.config.get('STORAGE_BACKEND', 'database'))


def get_image_store():
    """Return the image store of the current app."""
    return current_app.extensions['image_store']
