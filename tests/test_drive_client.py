"""Unit tests for DriveClient against a mocked HTTP transport."""

import json

import httpx
import pytest

from uploader.drive_client import DriveClient, StaticTokenAuthorizer
from uploader.exceptions import RemoteCallError
from uploader.retry import is_rate_limit_error


def drive_error(status, reason, message="error"):
    return httpx.Response(status, json={
        "error": {"code": status, "message": message, "errors": [{"reason": reason, "message": message}]}
    })


@pytest.fixture
def requests_seen():
    return []


@pytest.fixture
def mock_transport_success(requests_seen):
    """Mock transport answering like the Drive v3 API."""
    def handler(request):
        requests_seen.append(request)
        if request.url.path == '/upload/drive/v3/files' and request.method == 'POST':
            return httpx.Response(200, json={'id': 'drive-file-1'})
        elif request.url.path == '/drive/v3/files/drive-file-1' and request.method == 'GET':
            return httpx.Response(200, json={'id': 'drive-file-1', 'name': 'chunk-1', 'mimeType': 'text/plain'})
        elif request.url.path == '/drive/v3/files/drive-file-1/permissions':
            return httpx.Response(200, json={'id': 'anyoneWithLink', 'role': 'reader', 'type': 'anyone'})
        elif request.url.path == '/drive/v3/about':
            return httpx.Response(200, json={'storageQuota': {'limit': '1000', 'usage': '250'}})

        return drive_error(404, 'notFound', 'File not found')

    return httpx.MockTransport(handler)


@pytest.fixture
def client(mock_transport_success):
    return DriveClient(StaticTokenAuthorizer('ya29.secret'), base_url='http://drive.test', transport=mock_transport_success)


@pytest.mark.asyncio
async def test_create_object_sends_multipart_upload(client, requests_seen):
    remote_id = await client.create_object('chunk-1', b'payload-bytes', 'text/plain')

    assert remote_id == 'drive-file-1'
    request = requests_seen[0]
    assert request.url.params['uploadType'] == 'multipart'
    assert request.headers['Authorization'] == 'Bearer ya29.secret'
    assert request.headers['Content-Type'].startswith('multipart/related; boundary=')
    body = request.content
    assert b'{"name": "chunk-1"}' in body
    assert b'payload-bytes' in body


@pytest.mark.asyncio
async def test_get_object(client):
    metadata = await client.get_object('drive-file-1')

    assert metadata['name'] == 'chunk-1'


@pytest.mark.asyncio
async def test_set_permission_posts_body(client, requests_seen):
    assert await client.set_permission('drive-file-1', {'role': 'reader', 'type': 'anyone'})

    assert json.loads(requests_seen[0].content) == {'role': 'reader', 'type': 'anyone'}


@pytest.mark.asyncio
async def test_get_quota(client, requests_seen):
    quota = await client.get_quota()

    assert quota['storageQuota']['usage'] == '250'
    assert requests_seen[0].url.params['fields'] == 'storageQuota'


@pytest.mark.asyncio
async def test_not_found_raises_remote_call_error(client):
    with pytest.raises(RemoteCallError) as exc_info:
        await client.get_object('missing')

    assert exc_info.value.status == 404
    assert exc_info.value.reasons == ('notFound',)
    assert not is_rate_limit_error(exc_info.value)


@pytest.mark.asyncio
async def test_rate_limit_response_is_classified_transient():
    transport = httpx.MockTransport(lambda request: drive_error(403, 'userRateLimitExceeded', 'User Rate Limit Exceeded'))
    client = DriveClient(StaticTokenAuthorizer('t'), base_url='http://drive.test', transport=transport)

    with pytest.raises(RemoteCallError) as exc_info:
        await client.get_quota()

    assert is_rate_limit_error(exc_info.value)


@pytest.mark.asyncio
async def test_non_json_error_body():
    transport = httpx.MockTransport(lambda request: httpx.Response(502, text='Bad Gateway'))
    client = DriveClient(StaticTokenAuthorizer('t'), base_url='http://drive.test', transport=transport)

    with pytest.raises(RemoteCallError) as exc_info:
        await client.get_quota()

    assert exc_info.value.status == 502
    assert exc_info.value.reasons == ()


@pytest.mark.asyncio
async def test_transport_error_is_wrapped():
    def handler(request):
        raise httpx.ConnectError('connection refused', request=request)

    client = DriveClient(StaticTokenAuthorizer('t'), base_url='http://drive.test', transport=httpx.MockTransport(handler))

    with pytest.raises(RemoteCallError) as exc_info:
        await client.get_quota()

    assert exc_info.value.status is None


@pytest.mark.asyncio
async def test_upload_without_id_fails():
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json={}))
    client = DriveClient(StaticTokenAuthorizer('t'), base_url='http://drive.test', transport=transport)

    with pytest.raises(RemoteCallError):
        await client.create_object('chunk', b'x')

    await client.close()


@pytest.mark.asyncio
async def test_success_with_html_body_raises_remote_call_error():
    transport = httpx.MockTransport(lambda request: httpx.Response(200, text='<html>proxy page</html>'))
    client = DriveClient(StaticTokenAuthorizer('t'), base_url='http://drive.test', transport=transport)

    with pytest.raises(RemoteCallError) as exc_info:
        await client.create_object('chunk', b'x')

    assert exc_info.value.status == 200
    assert not is_rate_limit_error(exc_info.value)

    with pytest.raises(RemoteCallError):
        await client.get_object('drive-file-1')
    with pytest.raises(RemoteCallError):
        await client.get_quota()

    await client.close()


@pytest.mark.asyncio
async def test_success_with_non_object_json_raises_remote_call_error():
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json=['drive-file-1']))
    client = DriveClient(StaticTokenAuthorizer('t'), base_url='http://drive.test', transport=transport)

    with pytest.raises(RemoteCallError) as exc_info:
        await client.create_object('chunk', b'x')

    assert exc_info.value.status == 200
    await client.close()
