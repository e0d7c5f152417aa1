from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterator, Union

from .config import OUTPUT_DIR_MODE

logger = logging.getLogger(__name__)

# Output files are raw byte logs: each write appends one response body as-is,
# with no separator, so a file seen twice holds concatenated JSON documents.
# Use iter_documents() to read them back.


def ensure_output_dir(path: Union[str, Path], mode: int = OUTPUT_DIR_MODE) -> Path:
    p = Path(path)
    if not p.is_dir():
        p.mkdir(mode=mode, parents=True, exist_ok=True)
        logger.info("created output directory %s", p)
    return p


def already_fetched(path: Union[str, Path]) -> bool:
    """True if a regular file is already at `path`."""
    return Path(path).is_file()


def write_or_append(path: Union[str, Path], data: bytes) -> bool:
    """
    Create `path` with `data`, or append `data` to it if it exists.
    Returns False (after logging) on any OS error; nothing is retried.
    """
    p = Path(path)
    mode = "ab" if already_fetched(p) else "wb"
    try:
        with p.open(mode) as fh:
            fh.write(data)
    except OSError as e:
        verb = "appending to" if mode == "ab" else "writing to"
        logger.error("Error %s file %s: %s", verb, p, e)
        return False
    logger.info("Data successfully written to %s", p)
    return True


def iter_documents(path: Union[str, Path]) -> Iterator[Any]:
    """
    Yield each JSON document stored in a raw byte log, in write order.
    Stops with a warning at the first undecodable position.
    """
    text = Path(path).read_bytes().decode("utf-8", "replace")
    decoder = json.JSONDecoder()
    pos, end = 0, len(text)
    while True:
        while pos < end and text[pos].isspace():
            pos += 1
        if pos >= end:
            return
        try:
            doc, pos = decoder.raw_decode(text, pos)
        except ValueError as e:
            logger.warning("%s: stopped reading at offset %d: %s", path, pos, e)
            return
        yield doc
