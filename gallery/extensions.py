"""
Flask Extensions

The admin identity is tracked through Flask-Login; the session it lives in
is kept server-side (see gallery.sessions).
"""

from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager

# Database instance
db = SQLAlchemy()

# Login manager for the single administrator account
login_manager = LoginManager()
