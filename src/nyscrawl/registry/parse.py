from __future__ import annotations

import json
import logging
from typing import Any, Dict, Iterator, List, Optional, Union

logger = logging.getLogger(__name__)

RESULT_LIST_KEY = "entitySearchResultList"
ID_KEY = "dosID"


def _load(data: Union[bytes, str, None]) -> Optional[Any]:
    if not data:
        logger.warning("empty search response")
        return None
    try:
        return json.loads(data)
    except (ValueError, UnicodeDecodeError) as e:
        logger.error("could not parse search response: %s", e)
        return None


def iter_summaries(data: Union[bytes, str, None]) -> Iterator[Dict[str, Any]]:
    """Yield the entity-summary records of a search response, if any."""
    doc = _load(data)
    if doc is None:
        return
    yield from summaries_from_document(doc)


def summaries_from_document(doc: Any) -> Iterator[Dict[str, Any]]:
    """Same as iter_summaries, for an already decoded response."""
    if not isinstance(doc, dict):
        logger.error("search response is not a JSON object")
        return
    rows = doc.get(RESULT_LIST_KEY)
    if rows is None:
        logger.info("search response has no %s", RESULT_LIST_KEY)
        return
    if not isinstance(rows, list):
        logger.error("%s is not a list", RESULT_LIST_KEY)
        return
    for row in rows:
        if isinstance(row, dict):
            yield row
        else:
            logger.warning("skipping non-object search record: %r", row)


def parse_dos_id(value: Any) -> Optional[int]:
    """dosID string -> non-negative int, or None."""
    if isinstance(value, bool):
        return None
    try:
        n = int(str(value).strip())
    except (TypeError, ValueError):
        return None
    return n if n >= 0 else None


def extract_dos_ids(data: Union[bytes, str, None]) -> List[int]:
    """
    Pull dosIDs out of a GetComplexSearchMatchingEntities response.

    Order is preserved. Records whose dosID does not parse as a non-negative
    integer are skipped with a warning; a response that cannot be parsed at
    all yields []. Never raises.
    """
    return _ids(iter_summaries(data))


def dos_ids_from_document(doc: Any) -> List[int]:
    """extract_dos_ids for an already decoded response."""
    return _ids(summaries_from_document(doc))


def _ids(rows: Iterator[Dict[str, Any]]) -> List[int]:
    out: List[int] = []
    for row in rows:
        raw = row.get(ID_KEY)
        n = parse_dos_id(raw)
        if n is None:
            logger.warning("error converting dosID %r to int", raw)
            continue
        out.append(n)
    return out
