"""Object storage HTTP client (Supabase Storage REST API).

Step images live in one bucket under a fixed prefix; objects are addressed
by key and served from the bucket's public URL.
"""

import time
from typing import Optional

import httpx
import structlog

from stepwise.config import get_settings
from stepwise.core.exceptions import StorageError, ValidationError

settings = get_settings()
logger = structlog.get_logger(__name__)

RETRYABLE_STATUS = (429, 500, 502, 503, 504)


class StorageClient:
    """Client for a single storage bucket.

    Transport errors and 429/5xx answers are retried with a linear backoff;
    other 4xx answers fail at once.
    """

    def __init__(
        self,
        base_url: str = settings.STORAGE_URL,
        service_key: str = settings.STORAGE_SERVICE_KEY,
        bucket: str = settings.STORAGE_BUCKET,
        timeout: float = settings.STORAGE_TIMEOUT_SECONDS,
        transport: Optional[httpx.BaseTransport] = None,
        max_retries: int = 3,
        retry_delay: float = 1.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.bucket = bucket
        self.headers = {
            "Authorization": f"Bearer {service_key}",
            "apikey": service_key,
        }
        self.timeout = timeout
        self.transport = transport
        self.max_retries = max_retries
        self.retry_delay = retry_delay

    @property
    def public_prefix(self) -> str:
        return f"{self.base_url}/storage/v1/object/public/{self.bucket}/"

    def public_url(self, key: str) -> str:
        return f"{self.public_prefix}{key}"

    def key_from_url(self, url: str) -> str:
        """Storage key of an object given its public URL."""
        if not url or not url.startswith(self.public_prefix):
            raise ValidationError("Invalid image URL")
        key = url[len(self.public_prefix):].split("?", 1)[0]
        if not key:
            raise ValidationError("Invalid image URL")
        return key

    def put(self, key: str, content: bytes, content_type: str) -> str:
        """Store an object; returns its public URL."""
        response = self._request(
            "POST",
            self._object_url(key),
            content=content,
            headers={
                "Content-Type": content_type,
                "cache-control": "3600",
                "x-upsert": "false",
            },
        )
        logger.info("Image stored", key=key, size=len(content), status_code=response.status_code)
        return self.public_url(key)

    def delete(self, key: str) -> None:
        self._request("DELETE", self._object_url(key))
        logger.info("Image deleted", key=key)

    def _object_url(self, key: str) -> str:
        return f"{self.base_url}/storage/v1/object/{self.bucket}/{key}"

    def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        headers = {**self.headers, **kwargs.pop("headers", {})}
        last_error: Optional[Exception] = None

        for attempt in range(1, self.max_retries + 1):
            try:
                with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                    response = client.request(method, url, headers=headers, **kwargs)
                    response.raise_for_status()
                    return response
            except httpx.HTTPStatusError as e:
                last_error = e
                logger.warning(
                    "Storage request rejected",
                    method=method,
                    status_code=e.response.status_code,
                    body=e.response.text[:200],
                    attempt=attempt,
                )
                if e.response.status_code not in RETRYABLE_STATUS:
                    raise StorageError(_error_message(e.response)) from e
            except httpx.TransportError as e:
                last_error = e
                logger.warning(
                    "Storage connection error", method=method, error=str(e), attempt=attempt
                )

            if attempt < self.max_retries:
                time.sleep(self.retry_delay * attempt)

        raise StorageError() from last_error


def _error_message(response: httpx.Response) -> str:
    fallback = f"Storage request failed ({response.status_code})"
    try:
        body = response.json()
    except ValueError:
        return fallback
    if not isinstance(body, dict):
        return fallback
    return body.get("message") or body.get("error") or fallback
