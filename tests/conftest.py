import io
import re

import pytest
from PIL import Image as PILImage

from gallery import create_app
from gallery.config import TestConfig
from gallery.extensions import db

ADMIN_EMAIL = TestConfig.ADMIN_EMAIL
ADMIN_PASSWORD = TestConfig.ADMIN_PASSWORD


@pytest.fixture()
def app():
    app = create_app(TestConfig)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def make_image():
    def _make(width=800, height=600, fmt='JPEG', color=(200, 30, 30)):
        buf = io.BytesIO()
        PILImage.new('RGB', (width, height), color).save(buf, fmt)
        return buf.getvalue()
    return _make


@pytest.fixture()
def login():
    def _login(client, email=ADMIN_EMAIL, password=ADMIN_PASSWORD):
        return client.post('/login', data={'email': email, 'password': password})
    return _login


@pytest.fixture()
def admin_client(client, login):
    r = login(client)
    assert r.status_code == 302
    assert r.headers['Location'].endswith('/admin')
    return client


@pytest.fixture()
def csrf_token():
    """Render /admin and return the token embedded in its forms."""
    def _fetch(client):
        r = client.get('/admin')
        assert r.status_code == 200
        match = re.search(r'name="csrf_token" value="([0-9a-f]{64})"', r.get_data(as_text=True))
        assert match is not None
        return match.group(1)
    return _fetch


@pytest.fixture()
def upload():
    def _upload(client, data, token, filename='photo.jpg', mimetype='image/jpeg'):
        return client.post('/upload',
                           data={'image': (io.BytesIO(data), filename, mimetype), 'csrf_token': token},
                           content_type='multipart/form-data')
    return _upload
