"""Details API: biography and story detail documents from the blob store."""

import json
from typing import Optional, Sequence

from pydantic import ValidationError

from ..errors import InvalidRequestError, StorageServiceError
from ..retrieval.blob_store import BlobDocument, BlobStore
from ..utils.logging import get_logger
from .models import BiographyDetails

logger = get_logger(__name__)

DEFAULT_CONTAINER = "data"
BIOGRAPHY_DETAILS_BLOB = "biography/details/{accession}"
STORY_DETAILS_BLOB = "story/details/{story_id}"

# Sequence numbers arrive as 16-bit values
MAX_ORDER_VALUE = 32767


def parse_order(name: str, value: Optional[str]) -> int:
    """
    Parse a session/tape/story order parameter.

    Raises:
        InvalidRequestError: If missing, non-numeric, out of range or < 1
    """
    text = str(value).strip() if value is not None else ""
    if not text:
        raise InvalidRequestError(f"{name} is required")
    try:
        number = int(text)
    except ValueError:
        raise InvalidRequestError(f"{name} must be a whole number, got {text!r}") from None
    if number < 1 or number > MAX_ORDER_VALUE:
        raise InvalidRequestError(f"{name} must be between 1 and {MAX_ORDER_VALUE}, got {number}")
    return number


def _require(name: str, value: Optional[str]) -> str:
    text = value.strip() if value else ""
    if not text:
        raise InvalidRequestError(f"{name} is required")
    return text


def find_story_id(
    details: BiographyDetails,
    session_order: int,
    tape_order: int,
    story_order: int,
) -> Optional[str]:
    """
    Walk a biography details document to the story at a sequence position.

    Sessions and tapes are matched on their order values, not their list
    positions (a biography's first session may be numbered 2). Within a tape,
    story N is the Nth entry.

    Returns:
        Story ID, or None if no story sits at that position
    """
    story_id = None
    for session in details.sessions:
        if session.session_order != session_order:
            continue
        for tape in session.tapes:
            if tape.tape_order is None or tape.tape_order != tape_order:
                continue
            if len(tape.stories) >= story_order:
                story_id = tape.stories[story_order - 1].story_id
            break
    return story_id or None


class DetailsService:
    """
    Detail documents for biographies and stories.

    Args:
        store: Blob store client
        container: Container holding detail documents
        required_maker_categories: When set, biographies lacking any of these
            maker categories are treated as not found
    """

    def __init__(
        self,
        store: BlobStore,
        *,
        container: str = DEFAULT_CONTAINER,
        required_maker_categories: Optional[Sequence[str]] = None,
    ):
        self.store = store
        self.container = container
        self.required_maker_categories = tuple(required_maker_categories or ())

    def _load_biography(self, accession: str) -> Optional[tuple[BlobDocument, BiographyDetails]]:
        blob = self.store.fetch(self.container, BIOGRAPHY_DETAILS_BLOB.format(accession=accession))
        if blob is None:
            return None
        try:
            details = BiographyDetails.model_validate(json.loads(blob.content.decode("utf-8-sig")))
        except (ValueError, ValidationError) as e:
            logger.error(f"Unreadable biography details for {accession}: {e}")
            raise StorageServiceError(f"Unreadable biography details for {accession}: {e}") from e
        return blob, details

    def _in_deployment_subset(self, details: BiographyDetails) -> bool:
        return all(category in details.maker_categories for category in self.required_maker_categories)

    def biography_details(self, accession: Optional[str]) -> Optional[BlobDocument]:
        """
        Raw biography details document.

        Raises:
            InvalidRequestError: If accession is blank
        """
        accession = _require("accession", accession)
        if not self.required_maker_categories:
            return self.store.fetch(self.container, BIOGRAPHY_DETAILS_BLOB.format(accession=accession))

        loaded = self._load_biography(accession)
        if loaded is None:
            return None
        blob, details = loaded
        if not self._in_deployment_subset(details):
            logger.debug(f"Biography {accession} is outside the configured maker categories")
            return None
        return blob

    def story_details(self, story_id: Optional[str]) -> Optional[BlobDocument]:
        story_id = _require("storyID", story_id)
        return self.store.fetch(self.container, STORY_DETAILS_BLOB.format(story_id=story_id))

    def story_id_via_sequence(
        self,
        accession: str,
        session_order: int,
        tape_order: int,
        story_order: int,
    ) -> Optional[str]:
        loaded = self._load_biography(accession)
        if loaded is None:
            return None
        _, details = loaded
        if not self._in_deployment_subset(details):
            return None
        return find_story_id(details, session_order, tape_order, story_order)

    def story_details_via_sequence(
        self,
        accession: Optional[str],
        session_order: Optional[str],
        tape_order: Optional[str],
        story_order: Optional[str],
    ) -> Optional[BlobDocument]:
        """
        Story details addressed by accession and session/tape/story order.

        This reads the whole biography document to resolve the story ID, so it
        is slower than story_details; it exists for callers that should not
        depend on story IDs.

        Raises:
            InvalidRequestError: If any parameter is missing or not a positive number
            StorageServiceError: If the biography details document is unreadable
        """
        accession = _require("accession", accession)
        session_number = parse_order("sessionOrder", session_order)
        tape_number = parse_order("tapeOrder", tape_order)
        story_number = parse_order("storyOrder", story_order)

        story_id = self.story_id_via_sequence(accession, session_number, tape_number, story_number)
        if not story_id:
            return None
        return self.store.fetch(self.container, STORY_DETAILS_BLOB.format(story_id=story_id))
