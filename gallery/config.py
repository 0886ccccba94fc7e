"""
Configuration settings for the Image Gallery
"""
import os
from datetime import timedelta

from dotenv import load_dotenv

load_dotenv()


class Config:
    """Flask application configuration"""

    # Signs the session id cookie
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production-12345'

    # Database configuration
    basedir = os.path.abspath(os.path.dirname(os.path.dirname(__file__)))
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or \
        'sqlite:///' + os.path.join(basedir, 'instance', 'gallery.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Environment
    APP_ENV = os.environ.get('APP_ENV', 'development')
    IS_PRODUCTION = APP_ENV == 'production'
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    # Session cookie (the cookie only carries the signed session id)
    SESSION_COOKIE_NAME = 'gallery_session'
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'
    SESSION_COOKIE_SECURE = IS_PRODUCTION
    PERMANENT_SESSION_LIFETIME = timedelta(hours=24)

    # Admin seed, written once into the admins table
    ADMIN_EMAIL = os.environ.get('ADMIN_EMAIL')
    ADMIN_PASSWORD = os.environ.get('ADMIN_PASSWORD')
    PASSWORD_HASH_METHOD = 'pbkdf2:sha256'

    # Image storage: 'database' keeps the bytes in the images table,
    # 'filesystem' writes <timestamp>.<ext> files into UPLOAD_FOLDER
    STORAGE_BACKEND = os.environ.get('STORAGE_BACKEND', 'database')
    UPLOAD_FOLDER = os.environ.get('UPLOAD_FOLDER') or os.path.join(basedir, 'instance', 'uploads')

    # Upload limits
    MAX_UPLOAD_BYTES = 5 * 1024 * 1024
    MAX_IMAGE_DIMENSION = 2560
    ALLOWED_MIME_TYPES = ('image/jpeg', 'image/png')
    # Whole request body; leaves room for the multipart envelope
    MAX_CONTENT_LENGTH = MAX_UPLOAD_BYTES + 512 * 1024


class TestConfig(Config):
    """Testing configuration"""
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    SESSION_COOKIE_SECURE = False
    STORAGE_BACKEND = 'database'
    ADMIN_EMAIL = 'admin@example.com'
    ADMIN_PASSWORD = 'correct-horse'
    PASSWORD_HASH_METHOD = 'pbkdf2:sha256:1000'
