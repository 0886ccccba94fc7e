"""
Image Model
"""

from datetime import datetime
from gallery.extensions import db


class Image(db.Model):
    """Uploaded image kept as a blob (database storage backend)"""
    __tablename__ = 'images'

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    original_name = db.Column(db.String(255))
    mime_type = db.Column(db.String(32), nullable=False)
    data = db.Column(db.LargeBinary, nullable=False)
    uploaded_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)

    def __repr__(self):
        return f'<Image {self.id} {self.original_name}>'
