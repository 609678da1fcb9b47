import io
import os
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from healthwallet.storage import LocalFileStore, S3FileStore, build_file_store, get_file_store


def _client_error(code):
    return ClientError({'Error': {'Code': code, 'Message': 'missing'}}, 'HeadObject')


def test_local_save_keeps_extension_and_content(tmp_path):
    store = LocalFileStore(str(tmp_path / 'files'))
    handle = store.save(io.BytesIO(b'%PDF-1.4 data'), 'Blood Work.PDF', 'application/pdf')

    assert handle.startswith('file-')
    assert handle.endswith('.pdf')
    assert os.path.basename(handle) == handle
    with open(tmp_path / 'files' / handle, 'rb') as f:
        assert f.read() == b'%PDF-1.4 data'


def test_local_handles_are_unique(tmp_path):
    store = LocalFileStore(str(tmp_path))
    handles = {store.save(io.BytesIO(b'x'), 'a.png', 'image/png') for _ in range(5)}
    assert len(handles) == 5


def test_local_delete_twice(tmp_path):
    store = LocalFileStore(str(tmp_path))
    handle = store.save(io.BytesIO(b'x'), 'a.pdf', 'application/pdf')
    assert store.delete(handle) is True
    assert store.delete(handle) is False


@pytest.mark.parametrize('handle', ['', '../secret.pdf', 'nested/file.pdf'])
def test_local_refuses_paths(tmp_path, handle):
    store = LocalFileStore(str(tmp_path))
    with pytest.raises(ValueError):
        store.delete(handle)


def test_local_send(app, tmp_path):
    store = LocalFileStore(str(tmp_path))
    handle = store.save(io.BytesIO(b'%PDF-1.4 data'), 'report.pdf', 'application/pdf')
    with app.test_request_context():
        response = store.send(handle, 'report.pdf', 'application/pdf')
        response.direct_passthrough = False
        assert response.status_code == 200
        assert response.mimetype == 'application/pdf'
        assert response.get_data() == b'%PDF-1.4 data'
        response.close()


def test_s3_save_uses_reports_prefix():
    client = MagicMock()
    store = S3FileStore('bucket', client=client)
    stream = io.BytesIO(b'data')

    key = store.save(stream, 'scan.jpg', 'image/jpeg')

    assert key.startswith('reports/file-')
    assert key.endswith('.jpg')
    client.upload_fileobj.assert_called_once_with(
        stream, 'bucket', key, ExtraArgs={'ContentType': 'image/jpeg'})


def test_s3_delete_existing_object():
    client = MagicMock()
    store = S3FileStore('bucket', client=client)
    assert store.delete('reports/file-1.pdf') is True
    client.delete_object.assert_called_once_with(Bucket='bucket', Key='reports/file-1.pdf')


@pytest.mark.parametrize('code', ['404', 'NoSuchKey', 'NotFound'])
def test_s3_delete_missing_object(code):
    client = MagicMock()
    client.head_object.side_effect = _client_error(code)
    store = S3FileStore('bucket', client=client)

    assert store.delete('reports/file-1.pdf') is False
    client.delete_object.assert_not_called()


def test_s3_delete_propagates_other_errors():
    client = MagicMock()
    client.head_object.side_effect = _client_error('AccessDenied')
    store = S3FileStore('bucket', client=client)

    with pytest.raises(ClientError):
        store.delete('reports/file-1.pdf')


def test_s3_send_redirects_to_presigned_url(app):
    client = MagicMock()
    client.generate_presigned_url.return_value = 'https://bucket.s3.amazonaws.com/signed'
    store = S3FileStore('bucket', client=client, url_expires=60)

    with app.test_request_context():
        response = store.send('reports/file-1.pdf', 'report.pdf', 'application/pdf')

    assert response.status_code == 302
    assert response.headers['Location'] == 'https://bucket.s3.amazonaws.com/signed'
    kwargs = client.generate_presigned_url.call_args.kwargs
    assert kwargs['ExpiresIn'] == 60
    assert kwargs['Params']['Key'] == 'reports/file-1.pdf'


def test_s3_requires_bucket():
    with pytest.raises(ValueError):
        S3FileStore('', client=MagicMock())


def test_build_file_store(tmp_path):
    store = build_file_store({'FILE_STORE_BACKEND': 'local', 'UPLOAD_FOLDER': str(tmp_path)})
    assert isinstance(store, LocalFileStore)

    with pytest.raises(ValueError):
        build_file_store({'FILE_STORE_BACKEND': 'ftp', 'UPLOAD_FOLDER': str(tmp_path)})


def test_app_uses_configured_store(app, upload_folder):
    store = get_file_store()
    assert isinstance(store, LocalFileStore)
    assert store.upload_folder == upload_folder
