"""
NY DOS Public Inquiry integration.

This subpackage provides:
- HTTP session and never-raising POST wrapper (`http.py`)
- Request bodies for the search and detail endpoints (`payloads.py`)
- dosID extraction from search responses (`parse.py`)
- The registry client used by the runner (`client.py`)

Typical usage:
    from nyscrawl.registry import DosRegistryClient, extract_dos_ids
"""

from .client import DosRegistryClient
from .parse import extract_dos_ids, iter_summaries
from .payloads import build_detail_payload, build_search_payload

__all__ = [
    "DosRegistryClient",
    "build_search_payload",
    "build_detail_payload",
    "extract_dos_ids",
    "iter_summaries",
]
