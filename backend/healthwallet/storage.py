"""
Report file storage with pluggable backends.
Default 'local' backend keeps uploads on disk; 's3' keeps them in a bucket.

A backend hands out opaque handles. Nothing outside this module should
interpret a handle as a path or URL.
"""
import os
import time
import secrets
import logging
from abc import ABC, abstractmethod
import boto3
from botocore.exceptions import ClientError
from flask import current_app, redirect, send_from_directory
from werkzeug.utils import secure_filename

logger = logging.getLogger(__name__)


def _unique_name(original_name):
    """Timestamp plus random suffix, keeping the original extension."""
    ext = os.path.splitext(secure_filename(original_name or ''))[1].lower()
    return f'file-{int(time.time() * 1000)}-{secrets.randbelow(10**9)}{ext}'


class FileStore(ABC):
    """Abstract base class for report file storage."""

    @abstractmethod
    def save(self, stream, original_name, mimetype):
        """Store the stream and return a handle."""

    @abstractmethod
    def delete(self, handle):
        """Remove a stored file. Returns False if it was already gone."""

    @abstractmethod
    def send(self, handle, download_name, mimetype):
        """Build a Flask response delivering the file."""


class LocalFileStore(FileStore):
    """Stores files in a directory on the local filesystem."""

    def __init__(self, upload_folder):
        self.upload_folder = upload_folder
        os.makedirs(self.upload_folder, exist_ok=True)

    def _path(self, handle):
        # Handles are bare file names; refuse anything that could escape the folder
        if not handle or handle != os.path.basename(handle):
            raise ValueError(f'Invalid file handle: {handle!r}')
        return os.path.join(self.upload_folder, handle)

    def save(self, stream, original_name, mimetype):
        handle = _unique_name(original_name)
        with open(self._path(handle), 'wb') as out:
            while True:
                chunk = stream.read(64 * 1024)
                if not chunk:
                    break
                out.write(chunk)
        logger.info('Stored upload locally as %s', handle)
        return handle

    def delete(self, handle):
        try:
            os.remove(self._path(handle))
        except FileNotFoundError:
            logger.warning('Stored file %s was already absent', handle)
            return False
        return True

    def send(self, handle, download_name, mimetype):
        return send_from_directory(self.upload_folder, handle,
                                   mimetype=mimetype, download_name=download_name)


class S3FileStore(FileStore):
    """Stores files in an S3 bucket and serves them through short-lived presigned URLs."""

    def __init__(self, bucket, region=None, client=None, url_expires=300):
        if not bucket:
            raise ValueError('S3 file store requires S3_BUCKET_NAME')
        self.bucket = bucket
        self.url_expires = url_expires
        self.client = client or boto3.client(
            's3',
            region_name=region,
            aws_access_key_id=os.getenv('AWS_ACCESS_KEY_ID'),
            aws_secret_access_key=os.getenv('AWS_SECRET_ACCESS_KEY'),
        )

    def save(self, stream, original_name, mimetype):
        key = f'reports/{_unique_name(original_name)}'
        self.client.upload_fileobj(stream, self.bucket, key,
                                   ExtraArgs={'ContentType': mimetype})
        logger.info('Stored upload in s3://%s/%s', self.bucket, key)
        return key

    def delete(self, handle):
        try:
            self.client.head_object(Bucket=self.bucket, Key=handle)
        except ClientError as e:
            if e.response.get('Error', {}).get('Code') in ('404', 'NoSuchKey', 'NotFound'):
                logger.warning('Stored file %s was already absent', handle)
                return False
            raise
        self.client.delete_object(Bucket=self.bucket, Key=handle)
        return True

    def send(self, handle, download_name, mimetype):
        url = self.client.generate_presigned_url(
            'get_object',
            Params={
                'Bucket': self.bucket,
                'Key': handle,
                'ResponseContentType': mimetype,
                'ResponseContentDisposition': f'inline; filename="{download_name}"',
            },
            ExpiresIn=self.url_expires,
        )
        return redirect(url, code=302)


def build_file_store(config):
    """Build the backend named by FILE_STORE_BACKEND."""
    backend_name = (config.get('FILE_STORE_BACKEND') or 'local').lower()

    if backend_name == 'local':
        return LocalFileStore(config['UPLOAD_FOLDER'])
    elif backend_name == 's3':
        return S3FileStore(config.get('S3_BUCKET_NAME'), region=config.get('AWS_REGION'))
    else:
        raise ValueError(f'Unknown FILE_STORE_BACKEND: {backend_name}')


def init_file_store(app):
    """Create the store once per app; requests reach it through get_file_store()."""
    app.extensions['file_store'] = build_file_store(app.config)


def get_file_store():
    return current_app.extensions['file_store']
