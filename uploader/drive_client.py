"""HTTP client for the Google Drive v3 REST API, one instance per account."""

import json
import uuid
from typing import Any, Dict, Optional, Protocol

import httpx

from common.constants import DEFAULT_CHUNK_MIME_TYPE
from common.logging_config import get_logger
from uploader.config import DRIVE_API_BASE_URL, HTTP_TIMEOUT_SECONDS
from uploader.exceptions import RemoteCallError

logger = get_logger(__name__)


class RemoteBackend(Protocol):
    """Capability set an Account needs from its remote storage."""

    async def authorize(self) -> str: ...

    async def create_object(self, name: str, payload: bytes, mime_type: str = DEFAULT_CHUNK_MIME_TYPE) -> str: ...

    async def get_object(self, remote_id: str) -> Dict[str, Any]: ...

    async def set_permission(self, remote_id: str, permission: Dict[str, str]) -> bool: ...

    async def get_quota(self) -> Dict[str, Any]: ...

    async def close(self) -> None: ...


class StaticTokenAuthorizer:
    """Hands out a pre-issued OAuth access token."""

    def __init__(self, access_token: str):
        self._access_token = access_token

    async def authorize(self) -> str:
        return self._access_token


class DriveClient:
    """
    Drive v3 client for a single service account.
    Translates non-2xx responses into RemoteCallError carrying the Drive error reasons.
    """

    def __init__(
        self,
        authorizer: StaticTokenAuthorizer,
        base_url: str = DRIVE_API_BASE_URL,
        timeout: float = HTTP_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            authorizer: Source of bearer tokens
            base_url: API root, overridable for tests
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (e.g. httpx.MockTransport)
        """
        self.authorizer = authorizer
        self.session = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)

    async def close(self):
        await self.session.aclose()

    async def authorize(self) -> str:
        return await self.authorizer.authorize()

    async def _headers(self) -> Dict[str, str]:
        token = await self.authorize()
        return {
            "Accept": "application/json",
            "Authorization": f"Bearer {token}",
        }

    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        headers = await self._headers()
        headers.update(kwargs.pop("headers", {}))

        try:
            response = await self.session.request(method, url, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            raise RemoteCallError(f"{method} {url} failed: {e}") from e

        if response.is_success:
            return response

        status, reasons, message = self._parse_error(response)
        raise RemoteCallError(f"{method} {url} returned {status}: {message}", status=status, reasons=reasons)

    @staticmethod
    def _parse_error(response: httpx.Response):
        try:
            error = response.json().get("error", {})
        except (ValueError, AttributeError):
            return response.status_code, [], response.text

        if not isinstance(error, dict):
            return response.status_code, [], str(error)

        reasons = [item.get("reason") for item in error.get("errors", []) if item.get("reason")]
        return response.status_code, reasons, error.get("message", "")

    @staticmethod
    def _json(response: httpx.Response) -> Dict[str, Any]:
        try:
            body = response.json()
        except ValueError as e:
            raise RemoteCallError(
                f"{response.request.method} {response.request.url} returned an unreadable body: {e}",
                status=response.status_code,
            ) from e

        if not isinstance(body, dict):
            raise RemoteCallError(
                f"{response.request.method} {response.request.url} returned {type(body).__name__}, expected an object",
                status=response.status_code,
            )
        return body

    async def create_object(self, name: str, payload: bytes, mime_type: str = DEFAULT_CHUNK_MIME_TYPE) -> str:
        """
        Upload `payload` as a new Drive file using a multipart/related request.

        Returns:
            Drive file id
        """
        boundary = uuid.uuid4().hex
        metadata = json.dumps({"name": name}).encode("utf-8")
        body = b"".join([
            f"--{boundary}\r\nContent-Type: application/json; charset=UTF-8\r\n\r\n".encode("ascii"),
            metadata,
            f"\r\n--{boundary}\r\nContent-Type: {mime_type}\r\n\r\n".encode("ascii"),
            payload,
            f"\r\n--{boundary}--".encode("ascii"),
        ])

        response = await self._request(
            "POST",
            "/upload/drive/v3/files",
            params={"uploadType": "multipart", "fields": "id"},
            headers={"Content-Type": f"multipart/related; boundary={boundary}"},
            content=body,
        )
        remote_id = self._json(response).get("id")
        if not remote_id:
            raise RemoteCallError(f"Upload of {name} returned no file id", status=response.status_code)

        logger.debug(f"Created Drive file {remote_id} ({len(payload)} bytes)")
        return remote_id

    async def get_object(self, remote_id: str) -> Dict[str, Any]:
        response = await self._request("GET", f"/drive/v3/files/{remote_id}")
        return self._json(response)

    async def set_permission(self, remote_id: str, permission: Dict[str, str]) -> bool:
        await self._request(
            "POST",
            f"/drive/v3/files/{remote_id}/permissions",
            json=permission,
        )
        return True

    async def get_quota(self) -> Dict[str, Any]:
        response = await self._request("GET", "/drive/v3/about", params={"fields": "storageQuota"})
        return self._json(response)
