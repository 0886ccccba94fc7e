"""
Session Model
"""

from gallery.extensions import db


class StoredSession(db.Model):
    """Server-side session record, keyed by the id carried in the cookie"""
    __tablename__ = 'sessions'

    id = db.Column(db.String(128), primary_key=True)
    data = db.Column(db.Text, nullable=False, default='{}')
    expires_at = db.Column(db.DateTime, nullable=False, index=True)

    def __repr__(self):
        return f'<StoredSession {self.id[:8]}... expires {self.expires_at}>'
