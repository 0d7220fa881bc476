"""Result DTOs returned by the API layer."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class ResultSet(BaseModel):
    """Facets, documents and total count for one search."""
    facets: Dict[str, List[Dict[str, Any]]] = Field(default_factory=dict)
    documents: List[Dict[str, Any]] = Field(default_factory=list)
    count: Optional[int] = None


class HomePageInfo(BaseModel):
    """Corpus statistics for the home view."""
    search_service_name: str
    biography_count: int
    story_count: int
    # Only when forced facets restrict the deployment to a subset
    subset_biography_count: Optional[int] = None
    subset_story_count: Optional[int] = None


class _DetailsPart(BaseModel):
    """Base for detail-document parts; accepts camelCase or PascalCase keys."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def _camel_case_keys(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        return {
            (key[:1].lower() + key[1:] if isinstance(key, str) else key): value
            for key, value in data.items()
        }


class StoryRef(_DetailsPart):
    story_id: Optional[str] = Field(default=None, alias="storyID")

    @field_validator("story_id", mode="before")
    @classmethod
    def _as_text(cls, value: Any) -> Optional[str]:
        return None if value is None else str(value)


class BiographyTape(_DetailsPart):
    tape_order: Optional[int] = Field(default=None, alias="tapeOrder")
    stories: List[StoryRef] = Field(default_factory=list)

    @field_validator("stories", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return value or []


class BiographySession(_DetailsPart):
    session_order: Optional[int] = Field(default=None, alias="sessionOrder")
    tapes: List[BiographyTape] = Field(default_factory=list)

    @field_validator("tapes", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return value or []


class BiographyDetails(_DetailsPart):
    """The parts of a biography details document the API walks."""
    accession: Optional[str] = None
    maker_categories: List[str] = Field(default_factory=list, alias="makerCategories")
    sessions: List[BiographySession] = Field(default_factory=list)

    @field_validator("maker_categories", mode="before")
    @classmethod
    def _as_text_list(cls, value: Any) -> List[str]:
        return [str(v) for v in (value or [])]

    @field_validator("sessions", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return value or []
