"""Order-preserving retrieval of documents by caller-supplied ID lists."""

from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence


def parse_id_list(csv_ids: Optional[str]) -> List[str]:
    """
    Split a comma-separated ID list.

    Entries are trimmed and blanks dropped; order and duplicates are kept.
    """
    if not csv_ids:
        return []
    ids = []
    for item in csv_ids.split(","):
        item_id = item.strip()
        if item_id:
            ids.append(item_id)
    return ids


def reorder(
    ids: Sequence[str],
    documents: Iterable[Mapping[str, Any]],
    key: str = "storyID",
) -> List[Mapping[str, Any]]:
    """
    Join documents onto the ID list, keeping the ID list's order.

    IDs without a matching document are dropped. A repeated ID repeats its
    document(s). If several documents share one ID, all of them are emitted at
    that position in result order.

    Args:
        ids: Caller-ordered document IDs
        documents: Search results (any order)
        key: Document field holding the ID

    Returns:
        Matched documents in ID-list order
    """
    by_id: Dict[str, List[Mapping[str, Any]]] = {}
    for document in documents:
        doc_id = document.get(key)
        if doc_id is None:
            continue
        by_id.setdefault(str(doc_id), []).append(document)

    ordered: List[Mapping[str, Any]] = []
    for doc_id in ids:
        ordered.extend(by_id.get(doc_id, []))
    return ordered
