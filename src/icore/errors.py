"""Error taxonomy for the search core.

Three kinds of failure reach callers:

1. InvalidRequestError - malformed caller input, raised before any remote call
2. RemoteServiceError - the search or storage service failed; never retried here
3. Not found - not an exception; lookups return None
"""

from typing import List, Optional


class ICoreError(Exception):
    """Base class for all icore errors."""


class InvalidRequestError(ICoreError):
    """Caller input cannot be turned into a request (client error)."""


class FacetValidationError(InvalidRequestError):
    """Strict facet validation found one or more problems."""

    def __init__(self, problems: List[str]):
        self.problems = list(problems)
        super().__init__("Invalid facet values: " + "; ".join(self.problems))


class RemoteServiceError(ICoreError):
    """A remote collaborator failed (server error)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class SearchServiceError(RemoteServiceError):
    """The indexed search service failed or rejected a request."""


class StorageServiceError(RemoteServiceError):
    """The blob document store failed."""
