"""
Server-side Sessions

Session data lives in the ``sessions`` table; the browser only holds the
session id, signed with SECRET_KEY. Expiry is sliding: every response that
carries a non-empty session pushes both the row and the cookie forward by
PERMANENT_SESSION_LIFETIME.
"""

import logging
import secrets
from datetime import datetime

from flask.json.tag import TaggedJSONSerializer
from flask.sessions import SessionInterface, SessionMixin
from itsdangerous import BadSignature, Signer
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.datastructures import CallbackDict

from gallery.extensions import db
from gallery.models import StoredSession

logger = logging.getLogger(__name__)


def generate_session_id():
    """Return a new opaque session id (256 bits, url-safe)."""
    return secrets.token_urlsafe(32)


class ServerSideSession(CallbackDict, SessionMixin):
    """Session data for one browser, persisted under ``sid``."""

    def __init__(self, initial=None, sid=None, new=False, stale_cookie=False):
        def on_update(self):
            self.modified = True

        super().__init__(initial, on_update)
        self.sid = sid
        self.new = new
        self.stale_cookie = stale_cookie
        self.modified = False
        self.destroyed = False
        self.previous_sid = None

    def regenerate(self):
        """Move the data to a fresh id. The old row is dropped on save."""
        if self.previous_sid is None and not self.new:
            self.previous_sid = self.sid
        self.sid = generate_session_id()
        self.modified = True

    def destroy(self):
        """Drop all data; the row is deleted and the cookie expired on save."""
        self.clear()
        self.destroyed = True


class DatabaseSessionInterface(SessionInterface):
    """Keeps sessions in the database through Flask-SQLAlchemy."""

    session_class = ServerSideSession
    serializer = TaggedJSONSerializer()
    salt = 'gallery-session'

    def _signer(self, app):
        return Signer(app.secret_key, salt=self.salt)

    def open_session(self, app, request):
        if not app.secret_key:
            return None

        cookie = request.cookies.get(self.get_cookie_name(app))
        if not cookie:
            return self.session_class(sid=generate_session_id(), new=True)

        try:
            sid = self._signer(app).unsign(cookie).decode('utf-8')
        except BadSignature:
            logger.warning('Rejected session cookie with a bad signature')
            return self.session_class(sid=generate_session_id(), new=True, stale_cookie=True)

        record = db.session.get(StoredSession, sid)
        if record is not None:
            if record.expires_at > datetime.utcnow():
                return self.session_class(self.serializer.loads(record.data), sid=sid)
            logger.debug('Session %s... expired, removing it', sid[:8])
            self._delete_record(sid)
            self._commit()

        return self.session_class(sid=generate_session_id(), new=True, stale_cookie=True)

    def save_session(self, app, session, response):
        name = self.get_cookie_name(app)
        domain = self.get_cookie_domain(app)
        path = self.get_cookie_path(app)
        secure = self.get_cookie_secure(app)
        samesite = self.get_cookie_samesite(app)
        httponly = self.get_cookie_httponly(app)

        if session.previous_sid:
            self._delete_record(session.previous_sid)

        if not session:
            if not session.new:
                self._delete_record(session.sid)
            self._commit()
            if session.destroyed or session.stale_cookie or not session.new:
                response.delete_cookie(name, domain=domain, path=path, secure=secure,
                                       samesite=samesite, httponly=httponly)
            return

        expires = datetime.utcnow() + app.permanent_session_lifetime
        record = db.session.get(StoredSession, session.sid)
        if record is None:
            record = StoredSession(id=session.sid)
            db.session.add(record)
        record.data = self.serializer.dumps(dict(session))
        record.expires_at = expires
        self._commit()

        response.vary.add('Cookie')
        response.set_cookie(
            name,
            self._signer(app).sign(session.sid).decode('utf-8'),
            expires=expires,
            httponly=httponly,
            domain=domain,
            path=path,
            secure=secure,
            samesite=samesite,
        )

    @staticmethod
    def _delete_record(sid):
        StoredSession.query.filter_by(id=sid).delete()

    @staticmethod
    def _commit():
        try:
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            logger.exception('Could not persist session state')
            raise
