"""Pydantic models for facet selections, search requests and responses."""

from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _clean_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def split_csv(value: Any) -> Tuple[str, ...]:
    """
    Split a comma-separated value into trimmed, non-empty entries.

    Accepts a string ("a, b,,c") or any iterable of strings. Order and
    duplicates are kept.
    """
    if value is None:
        return ()
    if isinstance(value, str):
        parts = value.split(",")
    else:
        parts = list(value)
    cleaned = []
    for part in parts:
        text = _clean_text(part)
        if text is not None:
            cleaned.append(text)
    return tuple(cleaned)


class FacetSelection(BaseModel):
    """
    Independent, optional facet criteria for one request.

    Every field is either absent or non-empty after trimming. Normalization is
    permissive: values that cannot be used are dropped, never rejected.
    """

    model_config = ConfigDict(frozen=True)

    gender: Optional[str] = None
    birth_decade_start: Optional[int] = None
    maker_categories: Tuple[str, ...] = ()
    job_types: Tuple[str, ...] = ()
    last_initial: Optional[str] = None
    parent_biography_id: Optional[str] = None
    tags: Tuple[str, ...] = ()

    @field_validator("gender", "last_initial", "parent_biography_id", mode="before")
    @classmethod
    def _trim_scalar(cls, value: Any) -> Optional[str]:
        return _clean_text(value)

    @field_validator("maker_categories", "job_types", "tags", mode="before")
    @classmethod
    def _split_list(cls, value: Any) -> Tuple[str, ...]:
        return split_csv(value)

    @field_validator("birth_decade_start", mode="before")
    @classmethod
    def _parse_decade(cls, value: Any) -> Optional[int]:
        if value is None or isinstance(value, bool):
            return None
        if isinstance(value, int):
            return value
        text = _clean_text(value)
        if text is None:
            return None
        try:
            return int(text)
        except ValueError:
            # Fail open: an unusable decade just doesn't constrain anything
            return None

    @classmethod
    def from_params(
        cls,
        gender: Optional[str] = None,
        year: Optional[str] = None,
        maker: Optional[str] = None,
        job: Optional[str] = None,
        last_initial: Optional[str] = None,
        parent_biography_id: Optional[str] = None,
        tags: Optional[str] = None,
    ) -> "FacetSelection":
        """Build a selection from raw query-string values."""
        return cls(
            gender=gender,
            birth_decade_start=year,
            maker_categories=maker,
            job_types=job,
            last_initial=last_initial,
            parent_biography_id=parent_biography_id,
            tags=tags,
        )

    def is_empty(self) -> bool:
        return not any(
            (
                self.gender,
                self.birth_decade_start is not None,
                self.maker_categories,
                self.job_types,
                self.last_initial,
                self.parent_biography_id,
                self.tags,
            )
        )


class Granularity(str, Enum):
    """Size of a "born this ..." window."""

    DAY = "day"
    WEEK = "week"
    MONTH = "month"


class DateRange(BaseModel):
    """A run of days within one month: (month, day_low, day_high), inclusive."""

    model_config = ConfigDict(frozen=True)

    month: int = Field(..., ge=1, le=12)
    day_low: int = Field(..., ge=1, le=31)
    day_high: int = Field(..., ge=1, le=31)


class SearchMode(str, Enum):
    """Whether every search term must match, or any one of them."""

    ALL = "all"
    ANY = "any"


class SortOrder(BaseModel):
    """Single-field sort."""

    model_config = ConfigDict(frozen=True)

    field: str
    descending: bool = False

    def to_orderby(self) -> str:
        return f"{self.field} {'desc' if self.descending else 'asc'}"


class SearchRequest(BaseModel):
    """A fully compiled request for the search service."""

    free_text: str = ""
    search_mode: Optional[SearchMode] = None
    search_fields: List[str] = Field(default_factory=list)
    filter: Optional[str] = None
    facets: List[str] = Field(default_factory=list)
    select: List[str] = Field(default_factory=list)
    top: int = 0
    skip: int = 0
    include_total_count: bool = True
    highlight_fields: List[str] = Field(default_factory=list)
    highlight_pre_tag: Optional[str] = None
    highlight_post_tag: Optional[str] = None
    sort: Optional[SortOrder] = None

    def to_payload(self) -> Dict[str, Any]:
        """
        Render the REST request body understood by the search service.

        Unset parts are omitted rather than sent as null/empty.
        """
        payload: Dict[str, Any] = {
            "search": self.free_text,
            "top": self.top,
            "skip": self.skip,
            "count": self.include_total_count,
        }
        if self.search_mode is not None:
            payload["searchMode"] = self.search_mode.value
        if self.search_fields:
            payload["searchFields"] = ",".join(self.search_fields)
        if self.filter:
            payload["filter"] = self.filter
        if self.facets:
            payload["facets"] = list(self.facets)
        if self.select:
            payload["select"] = ",".join(self.select)
        if self.highlight_fields:
            payload["highlight"] = ",".join(self.highlight_fields)
            if self.highlight_pre_tag is not None:
                payload["highlightPreTag"] = self.highlight_pre_tag
            if self.highlight_post_tag is not None:
                payload["highlightPostTag"] = self.highlight_post_tag
        if self.sort is not None:
            payload["orderby"] = self.sort.to_orderby()
        return payload


class SuggestRequest(BaseModel):
    """Type-ahead request against a named suggester."""

    term: str
    suggester_name: str
    fuzzy: bool = False
    top: int = 8

    def to_payload(self) -> Dict[str, Any]:
        return {
            "search": self.term,
            "suggesterName": self.suggester_name,
            "fuzzy": self.fuzzy,
            "top": self.top,
        }


class SearchResponse(BaseModel):
    """Documents, facet buckets and total count returned by the service."""

    documents: List[Dict[str, Any]] = Field(default_factory=list)
    facets: Dict[str, List[Dict[str, Any]]] = Field(default_factory=dict)
    total_count: Optional[int] = None
