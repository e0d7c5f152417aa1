from __future__ import annotations

from typing import Protocol

from .contracts import FetchResult


class RegistryClient(Protocol):
    """
    Registry surface the runner drives. DosRegistryClient implements it;
    tests substitute their own doubles.
    """

    def search_entities(self, term: str) -> FetchResult: ...

    def entity_record(self, dos_id: int) -> FetchResult: ...
