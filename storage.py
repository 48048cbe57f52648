# Image storage backed by an S3-compatible object store
import logging
import os
import uuid

import boto3
from botocore.exceptions import ClientError
from flask import current_app
from werkzeug.utils import secure_filename

from errors import ServerError, ValidationError

logger = logging.getLogger(__name__)

NOT_FOUND_CODES = {'404', 'NoSuchKey', 'NotFound'}


def allowed_image(filename, allowed_extensions):
    _, ext = os.path.splitext(filename or '')
    return ext.lower().lstrip('.') in allowed_extensions


class ImageStorage:
    """Upload and delete post/profile images in a bucket."""

    def __init__(self, client, bucket, folder, public_url=None):
        self._client = client
        self.bucket = bucket
        self.folder = folder
        self.public_url = public_url

    @classmethod
    def from_config(cls, config):
        client = boto3.client(
            's3',
            region_name=config['S3_REGION'],
            endpoint_url=config.get('S3_ENDPOINT_URL'),
        )
        return cls(
            client,
            bucket=config['S3_BUCKET'],
            folder=config['UPLOAD_FOLDER_PREFIX'],
            public_url=config.get('S3_PUBLIC_URL'),
        )

    def url_for(self, key):
        if self.public_url:
            return f"{self.public_url.rstrip('/')}/{key}"
        return f"https://{self.bucket}.s3.amazonaws.com/{key}"

    def upload(self, file_storage):
        """Store an uploaded image; returns (url, key)."""
        filename = secure_filename(file_storage.filename or '')
        ext = os.path.splitext(filename)[1].lower()
        key = f"{self.folder}/{uuid.uuid4().hex}{ext}"
        try:
            self._client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=file_storage.stream.read(),
                ContentType=file_storage.mimetype or 'application/octet-stream',
            )
        except ClientError as e:
            logger.error("Image upload to %s failed: %s", self.bucket, e)
            raise ServerError('Server error during image upload') from e
        logger.info("Uploaded image %s", key)
        return self.url_for(key), key

    def delete(self, key):
        """Delete an image; returns False when no such object exists."""
        try:
            self._client.head_object(Bucket=self.bucket, Key=key)
        except ClientError as e:
            if e.response.get('Error', {}).get('Code') in NOT_FOUND_CODES:
                return False
            raise ServerError('Server error during image deletion') from e

        try:
            self._client.delete_object(Bucket=self.bucket, Key=key)
        except ClientError as e:
            raise ServerError('Server error during image deletion') from e
        logger.info("Deleted image %s", key)
        return True


def get_image_storage():
    storage = current_app.extensions.get('image_storage')
    if storage is None:
        storage = ImageStorage.from_config(current_app.config)
        current_app.extensions['image_storage'] = storage
    return storage


def validate_image_upload(file_storage):
    if file_storage is None or not file_storage.filename:
        raise ValidationError(message='No image file provided')
    allowed = current_app.config['ALLOWED_IMAGE_EXTENSIONS']
    if not allowed_image(file_storage.filename, allowed) \
            or not (file_storage.mimetype or '').startswith('image/'):
        raise ValidationError(message='Only image files are allowed!')
