"""Client for the remote indexed-search service (REST API)."""

from typing import Any, Dict, List, Optional

import requests

from ..errors import SearchServiceError
from ..search.models import SearchRequest, SearchResponse, SuggestRequest
from ..utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_API_VERSION = "2020-06-30"
DEFAULT_TIMEOUT_SECONDS = 30


class SearchGateway:
    """
    Executes compiled requests against one search service.

    One instance is built at startup and shared; it holds no per-request
    state. Failures propagate as SearchServiceError without retrying.
    """

    def __init__(
        self,
        *,
        service_name: str,
        api_key: str,
        api_version: str = DEFAULT_API_VERSION,
        endpoint: Optional[str] = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize gateway.

        Args:
            service_name: Search service name (used to derive the endpoint)
            api_key: Query or admin key sent in the api-key header
            api_version: REST API version
            endpoint: Explicit base URL; overrides the derived one
            timeout_seconds: Default per-call timeout
            session: Optional requests.Session (injected by tests)
        """
        self.service_name = service_name
        self.api_key = api_key
        self.api_version = api_version
        self.endpoint = (endpoint or f"https://{service_name}.search.windows.net").rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.session = session or requests.Session()

    def _headers(self) -> Dict[str, str]:
        return {
            "api-key": self.api_key,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def _url(self, index: str, action: str) -> str:
        return f"{self.endpoint}/indexes/{index}/docs/{action}"

    def _send(
        self,
        method: str,
        url: str,
        *,
        json_body: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> requests.Response:
        try:
            response = self.session.request(
                method,
                url,
                params={"api-version": self.api_version},
                headers=self._headers(),
                json=json_body,
                timeout=timeout if timeout is not None else self.timeout_seconds,
            )
            response.raise_for_status()
            return response
        except requests.RequestException as req_e:
            status_code = None
            if getattr(req_e, "response", None) is not None:
                status_code = req_e.response.status_code
            logger.error(f"Search service call failed ({method} {url}): {req_e}")
            raise SearchServiceError(f"Search service request failed: {req_e}", status_code) from req_e

    def search(self, index: str, request: SearchRequest, timeout: Optional[float] = None) -> SearchResponse:
        """
        Run a compiled search.

        Args:
            index: Index name
            request: Compiled request
            timeout: Per-call timeout override (seconds)

        Returns:
            SearchResponse with documents, facets and total count

        Raises:
            SearchServiceError: On transport or HTTP failure
        """
        payload = request.to_payload()
        logger.debug(f"Searching {index}: {payload}")
        response = self._send("POST", self._url(index, "search"), json_body=payload, timeout=timeout)
        try:
            body = response.json()
        except ValueError as e:
            raise SearchServiceError(f"Search service returned invalid JSON: {e}", response.status_code) from e

        total = body.get("@odata.count")
        return SearchResponse(
            documents=body.get("value", []) or [],
            facets=body.get("@search.facets", {}) or {},
            total_count=int(total) if total is not None else None,
        )

    def count(self, index: str, timeout: Optional[float] = None) -> int:
        """Total number of documents in an index."""
        response = self._send("GET", self._url(index, "$count"), timeout=timeout)
        # The service may prefix the plain-text count with a byte-order mark
        text = response.text.lstrip("\ufeff").strip()
        try:
            return int(text)
        except ValueError as e:
            raise SearchServiceError(f"Unexpected count response: {text!r}", response.status_code) from e

    def suggest(self, index: str, request: SuggestRequest, timeout: Optional[float] = None) -> List[str]:
        """Type-ahead suggestions (suggestion text only)."""
        response = self._send("POST", self._url(index, "suggest"), json_body=request.to_payload(), timeout=timeout)
        try:
            body = response.json()
        except ValueError as e:
            raise SearchServiceError(f"Search service returned invalid JSON: {e}", response.status_code) from e
        return [item.get("@search.text", "") for item in body.get("value", []) or []]
