"""Facet filter compiler: FacetSelection -> boolean filter expression.

Sub-expressions are emitted in a fixed order (gender, birth decade, maker
categories, job types, last initial, parent biography, tags) and joined with
"and". Multi-valued facets require every selected value to be present on the
document, not any one of them.

Compilation never raises. Values that cannot be used contribute nothing.
"""

from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from .models import FacetSelection, split_csv

# The birth year facet is requested with interval:10, so a decade bucket is [X, X+10).
DECADE_SPAN = 10

LIST_FACETS = ("maker_categories", "job_types", "tags")
SCALAR_FACETS = ("gender", "birth_decade_start", "last_initial", "parent_biography_id")
FACET_NAMES = SCALAR_FACETS + LIST_FACETS


def quote_literal(value: str) -> str:
    """Render an OData string literal (single quotes doubled)."""
    return "'" + value.replace("'", "''") + "'"


def join_filters(*parts: Optional[str]) -> Optional[str]:
    """
    Conjoin filter fragments, skipping empty ones.

    Returns:
        "a and b" for the non-empty parts, or None if there are none
    """
    present = [part for part in parts if part]
    if not present:
        return None
    return " and ".join(present)


def gender_filter(gender: Optional[str]) -> Optional[str]:
    if not gender:
        return None
    return f"gender eq {quote_literal(gender)}"


def birth_decade_filter(decade_start: Optional[int]) -> Optional[str]:
    """
    Half-open decade window. The start is not checked for being a decade
    boundary; 1955 yields [1955, 1965).
    """
    if decade_start is None:
        return None
    return f"birthYear ge {decade_start} and birthYear lt {decade_start + DECADE_SPAN}"


def _all_of(collection: str, variable: str, values: Iterable[str]) -> Optional[str]:
    expressions = [
        f"{collection}/any({variable}: {variable} eq {quote_literal(value)})"
        for value in values
        if value and value.strip()
    ]
    return join_filters(*expressions)


def maker_categories_filter(values: Sequence[str]) -> Optional[str]:
    return _all_of("makerCategories", "c", values)


def job_types_filter(values: Sequence[str]) -> Optional[str]:
    return _all_of("occupationTypes", "o", values)


def tags_filter(values: Sequence[str]) -> Optional[str]:
    return _all_of("tags", "t", values)


def last_initial_filter(initial: Optional[str]) -> Optional[str]:
    if not initial:
        return None
    return f"lastInitial eq {quote_literal(initial)}"


def parent_biography_filter(biography_id: Optional[str]) -> Optional[str]:
    if not biography_id:
        return None
    return f"biographyID eq {quote_literal(biography_id)}"


def compile_filter(selection: FacetSelection) -> Optional[str]:
    """
    Compile a facet selection into a filter expression.

    Args:
        selection: Facet criteria (absent fields contribute nothing)

    Returns:
        Filter expression, or None when no facet is set
    """
    return join_filters(
        gender_filter(selection.gender),
        birth_decade_filter(selection.birth_decade_start),
        maker_categories_filter(selection.maker_categories),
        job_types_filter(selection.job_types),
        last_initial_filter(selection.last_initial),
        parent_biography_filter(selection.parent_biography_id),
        tags_filter(selection.tags),
    )


def apply_forced_facets(selection: FacetSelection, forced: Mapping[str, object]) -> FacetSelection:
    """
    Merge deployment-level forced facet values into a caller selection.

    List facets get the forced value first, followed by the caller's values
    (minus repeats of the forced value). Scalar facets are overwritten.
    """
    if not forced:
        return selection
    updates: Dict[str, object] = {}
    for name, forced_value in forced.items():
        if name in LIST_FACETS:
            forced_values = split_csv(forced_value)
            caller_values = [v for v in getattr(selection, name) if v not in forced_values]
            updates[name] = tuple(forced_values) + tuple(caller_values)
        elif name in SCALAR_FACETS:
            updates[name] = forced_value
    # Re-validate so forced values go through the same normalization
    return FacetSelection(**{**selection.model_dump(), **updates})


class FacetFilterCompiler:
    """Compiler bound to deployment-level forced facet constraints."""

    def __init__(self, forced: Optional[Mapping[str, object]] = None):
        forced = dict(forced or {})
        unknown = sorted(set(forced) - set(FACET_NAMES))
        if unknown:
            raise ValueError(f"Unknown forced facet(s): {', '.join(unknown)}")
        self.forced = forced

    def effective_selection(self, selection: FacetSelection) -> FacetSelection:
        return apply_forced_facets(selection, self.forced)

    def compile(self, selection: FacetSelection) -> Optional[str]:
        return compile_filter(self.effective_selection(selection))


def validate_facet_params(
    *,
    gender: Optional[str] = None,
    year: Optional[str] = None,
    maker: Optional[str] = None,
    job: Optional[str] = None,
    last_initial: Optional[str] = None,
    tags: Optional[str] = None,
    vocabularies: Optional[Mapping[str, Iterable[str]]] = None,
) -> List[str]:
    """
    Strict-mode checks over raw facet parameters.

    This is an opt-in layer above the compiler; the compiler itself keeps
    accepting anything. Vocabularies map "maker_categories"/"job_types"/"tags"
    to the allowed identifiers; a facet without a vocabulary is not checked
    for membership.

    Returns:
        List of human-readable problems (empty if everything is usable)
    """
    problems: List[str] = []
    vocabularies = vocabularies or {}

    if gender is not None and str(gender).strip() and not str(gender).strip().isalpha():
        problems.append(f"gender '{gender}' is not a word")

    year_text = str(year).strip() if year is not None else ""
    if year_text:
        try:
            decade = int(year_text)
        except ValueError:
            problems.append(f"birth year '{year_text}' is not a number")
        else:
            if decade % DECADE_SPAN != 0:
                problems.append(f"birth year {decade} is not a decade boundary")

    initial_text = str(last_initial).strip() if last_initial is not None else ""
    if initial_text and not (len(initial_text) == 1 and initial_text.isalpha()):
        problems.append(f"last initial '{initial_text}' is not a single letter")

    for name, raw in (("maker_categories", maker), ("job_types", job), ("tags", tags)):
        allowed = vocabularies.get(name)
        if allowed is None:
            continue
        allowed_set = {str(v) for v in allowed}
        for value in split_csv(raw):
            if value not in allowed_set:
                problems.append(f"unknown {name} value '{value}'")

    return problems
