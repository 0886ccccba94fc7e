"""
Admin Model
"""

from flask_login import UserMixin
from gallery.extensions import db


class Admin(UserMixin, db.Model):
    """The single administrator allowed into the management area"""
    __tablename__ = 'admins'

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)

    def __repr__(self):
        return f'<Admin {self.email}>'
