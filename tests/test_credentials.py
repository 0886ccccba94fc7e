import pytest

from gallery.models import Admin
from gallery.services.credentials import authenticate, ensure_admin, verify
from gallery.config import TestConfig

ADMIN_EMAIL = TestConfig.ADMIN_EMAIL
ADMIN_PASSWORD = TestConfig.ADMIN_PASSWORD


@pytest.fixture(autouse=True)
def app_context(app):
    with app.app_context():
        yield


def test_admin_is_provisioned_with_a_hash():
    admin = Admin.query.filter_by(email=ADMIN_EMAIL).one()
    assert admin.password_hash != ADMIN_PASSWORD
    assert admin.password_hash.startswith('pbkdf2:sha256')


def test_authenticate_with_correct_password():
    admin = authenticate(ADMIN_EMAIL, ADMIN_PASSWORD)
    assert admin is not None
    assert admin.email == ADMIN_EMAIL
    assert verify(f'  {ADMIN_EMAIL} ', ADMIN_PASSWORD)


@pytest.mark.parametrize('email, password', [
    (ADMIN_EMAIL, 'wrong-password'),
    ('nobody@example.com', ADMIN_PASSWORD),
    (ADMIN_EMAIL, ''),
    ('', ADMIN_PASSWORD),
    (None, None),
])
def test_authenticate_failures_return_none(email, password):
    assert authenticate(email, password) is None
    assert verify(email, password) is False


def test_ensure_admin_never_overwrites():
    original_hash = Admin.query.filter_by(email=ADMIN_EMAIL).one().password_hash
    admin = ensure_admin(ADMIN_EMAIL, 'another-password')
    assert admin.password_hash == original_hash
    assert Admin.query.count() == 1
    assert verify(ADMIN_EMAIL, ADMIN_PASSWORD)
    assert not verify(ADMIN_EMAIL, 'another-password')


def test_ensure_admin_without_seed_is_noop():
    assert ensure_admin('', 'x') is None
    assert ensure_admin('someone@example.com', None) is None
    assert Admin.query.count() == 1
