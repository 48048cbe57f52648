# Configuration settings
import os
from datetime import timedelta


class Config:
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL', 'sqlite:///social_media.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JWT_SECRET_KEY = os.environ.get('JWT_SECRET_KEY', 'change-me-in-production')
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(days=int(os.environ.get('JWT_EXPIRES_DAYS', 7)))
    BCRYPT_LOG_ROUNDS = int(os.environ.get('BCRYPT_LOG_ROUNDS', 12))
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    # Uploads
    MAX_CONTENT_LENGTH = int(os.environ.get('MAX_CONTENT_LENGTH', 5 * 1024 * 1024))
    ALLOWED_IMAGE_EXTENSIONS = {'jpg', 'jpeg', 'png', 'gif', 'webp'}
    UPLOAD_FOLDER_PREFIX = os.environ.get('UPLOAD_FOLDER_PREFIX', 'social-media-app')
    S3_BUCKET = os.environ.get('S3_BUCKET', 'social-media-app')
    S3_REGION = os.environ.get('S3_REGION', 'us-east-1')
    S3_ENDPOINT_URL = os.environ.get('S3_ENDPOINT_URL')
    S3_PUBLIC_URL = os.environ.get('S3_PUBLIC_URL')

    # Pagination
    DEFAULT_PAGE_LIMIT = 10
    MAX_PAGE_LIMIT = 100

    DEBUG = False


class DevelopmentConfig(Config):
    DEBUG = True


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    JWT_SECRET_KEY = 'testing-secret-key-with-enough-length-for-hs256'
    BCRYPT_LOG_ROUNDS = 4
    S3_BUCKET = 'test-bucket'
    S3_PUBLIC_URL = 'https://cdn.example.com'


class ProductionConfig(Config):
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL')


config = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'production': ProductionConfig,
    'default': DevelopmentConfig
}
