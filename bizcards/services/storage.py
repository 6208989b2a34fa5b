"""
Object storage client for employee photos.

Talks to a storage REST API (``POST /object/{bucket}/{path}``) and serves
objects from public buckets.
"""

import httpx
from typing import Optional
from bizcards.core.config import settings
from bizcards.core.errors import BucketNotFoundError, StorageError
from bizcards.core.logging_config import logger


class StorageClient:
    """Client for the object storage API."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        service_key: Optional[str] = None,
        transport: Optional[httpx.BaseTransport] = None,
        timeout: float = 30.0
    ):
        """
        Initialize storage client.

        Args:
            base_url: Storage API root (defaults to settings.STORAGE_URL)
            service_key: Service role key sent as bearer token
            transport: Optional httpx transport, used by tests
            timeout: Request timeout in seconds
        """
        self.base_url = (base_url or settings.STORAGE_URL).rstrip("/")
        self.service_key = service_key if service_key is not None else settings.STORAGE_SERVICE_KEY
        self.transport = transport
        self.timeout = timeout
        if not self.service_key:
            logger.warning("STORAGE_SERVICE_KEY not set. Photo uploads will be rejected by storage.")

    def _headers(self, content_type: str) -> dict:
        headers = {"Content-Type": content_type, "x-upsert": "false"}
        if self.service_key:
            headers["Authorization"] = f"Bearer {self.service_key}"
            headers["apikey"] = self.service_key
        return headers

    def upload(self, bucket: str, path: str, data: bytes, content_type: str) -> str:
        """
        Upload an object and return its storage path.

        Raises:
            BucketNotFoundError: If the bucket does not exist
            StorageError: On any other upload failure
        """
        url = f"{self.base_url}/object/{bucket}/{path}"
        logger.info(f"Uploading {len(data)} bytes to storage bucket {bucket}")

        try:
            with httpx.Client(transport=self.transport, timeout=self.timeout) as client:
                response = client.post(url, content=data, headers=self._headers(content_type))
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            message = _error_message(e.response)
            if "bucket not found" in message.lower():
                raise BucketNotFoundError(bucket)
            logger.error(f"Storage upload failed: {message}")
            raise StorageError(message)
        except httpx.HTTPError as e:
            logger.error(f"Storage unreachable: {str(e)}")
            raise StorageError(str(e))

        return path

    def public_url(self, bucket: str, path: str) -> str:
        return f"{self.base_url}/object/public/{bucket}/{path}"


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(body, dict):
        return str(body.get("message") or body.get("error") or body)
    return str(body)


# Create singleton instance
storage_client = StorageClient()
