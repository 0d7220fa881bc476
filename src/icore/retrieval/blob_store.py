"""Blob document store client (biography and story detail documents)."""

from typing import Optional
from urllib.parse import quote

import requests
from pydantic import BaseModel

from ..errors import StorageServiceError
from ..utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30

# Downstream consumers reject "application/json; charset=utf-8"; the bare media type is served instead.
CHARSET_SUFFIX_TO_DROP = "; charset=utf-8"


class BlobDocument(BaseModel):
    """A downloaded blob."""

    content: bytes
    content_type: Optional[str] = None
    length: int


def normalize_content_type(content_type: Optional[str]) -> Optional[str]:
    if content_type and content_type.endswith(CHARSET_SUFFIX_TO_DROP):
        return content_type[: -len(CHARSET_SUFFIX_TO_DROP)]
    return content_type


class BlobStore:
    """Reads blobs over HTTPS, authenticating with an optional SAS token."""

    def __init__(
        self,
        *,
        account_url: str,
        sas_token: Optional[str] = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        session: Optional[requests.Session] = None,
    ):
        self.account_url = account_url.rstrip("/")
        self.sas_token = (sas_token or "").lstrip("?")
        self.timeout_seconds = timeout_seconds
        self.session = session or requests.Session()

    def blob_url(self, container: str, blob_name: str) -> str:
        url = f"{self.account_url}/{quote(container)}/{quote(blob_name)}"
        if self.sas_token:
            url = f"{url}?{self.sas_token}"
        return url

    def fetch(self, container: str, blob_name: str, timeout: Optional[float] = None) -> Optional[BlobDocument]:
        """
        Download one blob.

        Args:
            container: Container name
            blob_name: Blob path within the container
            timeout: Per-call timeout override (seconds)

        Returns:
            BlobDocument, or None if the name is blank or the blob doesn't exist

        Raises:
            StorageServiceError: On any other transport or HTTP failure
        """
        if not blob_name:
            return None

        url = self.blob_url(container, blob_name)
        try:
            response = self.session.get(
                url,
                timeout=timeout if timeout is not None else self.timeout_seconds,
            )
        except requests.RequestException as req_e:
            logger.error(f"Blob fetch failed for {container}/{blob_name}: {req_e}")
            raise StorageServiceError(f"Blob store request failed: {req_e}") from req_e

        if response.status_code == 404:
            logger.debug(f"Blob not found: {container}/{blob_name}")
            return None

        try:
            response.raise_for_status()
        except requests.RequestException as req_e:
            logger.error(f"Blob fetch failed for {container}/{blob_name}: {req_e}")
            raise StorageServiceError(
                f"Blob store request failed: {req_e}", response.status_code
            ) from req_e

        content = response.content
        return BlobDocument(
            content=content,
            content_type=normalize_content_type(response.headers.get("Content-Type")),
            length=len(content),
        )
