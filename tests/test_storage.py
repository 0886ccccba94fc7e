import builtins
import os
import re

import pytest

from gallery.errors import ImageNotFound, StorageError
from gallery.services import storage
from gallery.services.storage import DatabaseImageStore, FilesystemImageStore, create_image_store


@pytest.fixture()
def db_store(app):
    with app.app_context():
        yield DatabaseImageStore()


@pytest.fixture()
def fs_store(tmp_path):
    return FilesystemImageStore(str(tmp_path / 'uploads'))


def test_database_save_and_get(db_store, make_image):
    data = make_image()
    saved = db_store.save('cat.jpg', 'image/jpeg', data)
    assert isinstance(saved.id, int)

    fetched = db_store.get(saved.id)
    assert fetched.data == data
    assert fetched.mime_type == 'image/jpeg'
    assert fetched.original_name == 'cat.jpg'
    # ids arrive from the URL as strings
    assert db_store.get(str(saved.id)).data == data


def test_database_list_is_newest_first_without_bytes(db_store, make_image):
    ids = [db_store.save(f'{n}.jpg', 'image/jpeg', make_image()).id for n in range(3)]
    listed = db_store.list()
    assert [image.id for image in listed] == list(reversed(ids))
    assert all(image.data is None for image in listed)


def test_database_delete_is_idempotent(db_store, make_image):
    saved = db_store.save('a.png', 'image/png', make_image(fmt='PNG'))
    assert db_store.delete(saved.id) is True
    assert db_store.delete(saved.id) is False
    assert db_store.list() == []
    with pytest.raises(ImageNotFound):
        db_store.get(saved.id)


@pytest.mark.parametrize('image_id', ['abc', '', None, '1; DROP TABLE images'])
def test_database_invalid_ids(db_store, image_id):
    with pytest.raises(ImageNotFound):
        db_store.get(image_id)
    assert db_store.delete(image_id) is False


def test_filesystem_save_names_files_by_timestamp(fs_store, make_image):
    data = make_image()
    saved = fs_store.save('holiday.jpg', 'image/jpeg', data)
    assert re.fullmatch(r'\d+\.jpg', saved.id)
    with open(os.path.join(fs_store.directory, saved.id), 'rb') as f:
        assert f.read() == data

    png = fs_store.save('shot.png', 'image/png', make_image(fmt='PNG'))
    assert png.id.endswith('.png')


def test_filesystem_ids_never_collide(fs_store, make_image, monkeypatch):
    monkeypatch.setattr(storage, '_now_millis', lambda: 1700000000000)
    first = fs_store.save('a.jpg', 'image/jpeg', make_image())
    second = fs_store.save('b.jpg', 'image/jpeg', make_image())
    assert first.id == '1700000000000.jpg'
    assert second.id == '1700000000001.jpg'


def test_filesystem_list_newest_first(fs_store, make_image, monkeypatch):
    for ts in (1000.0, 3000.0, 2000.0):
        monkeypatch.setattr(storage, '_now_millis', lambda ts=ts: int(ts * 1000))
        fs_store.save('x.jpg', 'image/jpeg', make_image())
    # files that do not follow the naming scheme are ignored
    open(os.path.join(fs_store.directory, 'notes.txt'), 'w').close()

    listed = fs_store.list()
    assert [image.id for image in listed] == ['3000000.jpg', '2000000.jpg', '1000000.jpg']
    assert listed[0].uploaded_at.year == 1970


def test_filesystem_get_and_delete(fs_store, make_image):
    saved = fs_store.save('a.jpg', 'image/jpeg', make_image())
    fetched = fs_store.get(saved.id)
    assert fetched.mime_type == 'image/jpeg'
    assert os.path.isfile(fetched.path)

    assert fs_store.delete(saved.id) is True
    assert not os.path.exists(fetched.path)
    assert fs_store.delete(saved.id) is False
    with pytest.raises(ImageNotFound):
        fs_store.get(saved.id)


@pytest.mark.parametrize('image_id', [
    '../secret.jpg', '..', '/etc/passwd', '123.jpg/../../x.jpg', 'a.jpg', '..%2F1.jpg', '1.jpg\n', '',
])
def test_filesystem_rejects_unsafe_ids(fs_store, tmp_path, image_id):
    outside = tmp_path / 'secret.jpg'
    outside.write_bytes(b'keep me')

    with pytest.raises(ImageNotFound):
        fs_store.get(image_id)
    assert fs_store.delete(image_id) is False
    assert outside.read_bytes() == b'keep me'


def test_filesystem_removes_partial_file_when_write_fails(fs_store, make_image, monkeypatch):
    class FailingFile:
        def __init__(self, path, mode):
            self._f = builtins.open(path, mode)

        def __enter__(self):
            return self

        def __exit__(self, *exc):
            self._f.close()
            return False

        def write(self, data):
            raise OSError('disk full')

    monkeypatch.setattr(storage, 'open', FailingFile, raising=False)
    with pytest.raises(StorageError):
        fs_store.save('a.jpg', 'image/jpeg', make_image())
    assert os.listdir(fs_store.directory) == []


def test_filesystem_rejects_unknown_mime(fs_store):
    with pytest.raises(StorageError):
        fs_store.save('a.gif', 'image/gif', b'GIF89a')


def test_create_image_store_selects_backend(tmp_path):
    assert isinstance(create_image_store({'STORAGE_BACKEND': 'database'}), DatabaseImageStore)
    fs = create_image_store({'STORAGE_BACKEND': 'filesystem', 'UPLOAD_FOLDER': str(tmp_path)})
    assert isinstance(fs, FilesystemImageStore)
    with pytest.raises(ValueError):
        create_image_store({'STORAGE_BACKEND': 's3'})
