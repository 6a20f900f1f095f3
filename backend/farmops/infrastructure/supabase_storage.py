"""Supabase Storage Client — uploads and removes objects via the Storage REST API.

Invariants:
    - Every request authenticates with the service-role key (server-side only)
    - Transport errors and non-2xx responses mapped to StorageError
    - public_url() is pure string building (bucket must be public)
    - Object paths go into URLs percent-encoded per segment; remove() sends
      them raw in the JSON body

Design Decisions:
    - httpx.AsyncClient owned by the instance, closed in the FastAPI lifespan
    - Upload uses x-upsert so re-uploading the same object name overwrites
"""

import logging

import httpx

from farmops.core.errors import StorageError
from farmops.core.storage_paths import quote_object_path

logger = logging.getLogger(__name__)


class SupabaseStorageClient:
    """Thin async wrapper around one Supabase Storage bucket."""

    def __init__(
        self,
        base_url: str,
        service_key: str,
        bucket: str,
        timeout_seconds: float = 30,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.bucket = bucket
        self._client = httpx.AsyncClient(
            base_url=f"{self.base_url}/storage/v1",
            headers={
                "Authorization": f"Bearer {service_key}",
                "apikey": service_key,
            },
            timeout=timeout_seconds,
            transport=transport,
        )

    async def upload(
        self,
        path: str,
        content: bytes,
        content_type: str | None = None,
        upsert: bool = True,
    ) -> str:
        """Upload bytes to `path` in the bucket; returns the object path."""
        headers = {
            "Content-Type": content_type or "application/octet-stream",
            "x-upsert": "true" if upsert else "false",
        }
        await self._request(
            "POST", f"/object/{self.bucket}/{quote_object_path(path)}", "upload",
            content=content, headers=headers,
        )
        logger.info("Storage upload ok", extra={"object_path": path})
        return path

    async def remove(self, paths: list[str]) -> None:
        if not paths:
            return
        await self._request(
            "DELETE", f"/object/{self.bucket}", "remove",
            json={"prefixes": paths},
        )

    def public_url(self, path: str) -> str:
        return (
            f"{self.base_url}/storage/v1/object/public/{self.bucket}/"
            f"{quote_object_path(path)}"
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, url: str, operation: str, **kwargs):
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"Storage {operation} transport error: {e}")
            raise StorageError(f"Storage {operation} failed", operation)
        if response.is_error:
            logger.error(
                f"Storage {operation} rejected: {response.status_code} {response.text}",
            )
            raise StorageError(f"Storage {operation} failed", operation)
        return response


# Singleton (initialized on startup)
storage_client: SupabaseStorageClient | None = None


def init_storage(base_url: str, service_key: str, bucket: str, **kwargs) -> None:
    global storage_client
    storage_client = SupabaseStorageClient(base_url, service_key, bucket, **kwargs)


def get_storage() -> SupabaseStorageClient:
    """FastAPI dependency for the storage client."""
    if not storage_client:
        raise RuntimeError("Storage client not initialized")
    return storage_client
