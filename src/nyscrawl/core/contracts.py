from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional


@dataclass(frozen=True)
class FetchResult:
    """
    Outcome of one POST against the registry.

    status is the HTTP status, or -1 when no response was received.
    body holds the raw response bytes whenever they could be read, including
    for non-2xx responses; callers decide what to do with those.
    """

    url: str
    status: int
    body: Optional[bytes] = None
    error: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300 and self.body is not None

    @property
    def snippet(self) -> str:
        if self.body is None:
            return self.error
        return self.body[:300].decode("utf-8", "replace").replace("\n", " ")


@dataclass
class CycleResult:
    token: str
    search_status: int = 0
    search_file: Optional[Path] = None
    search_skipped: bool = False
    dos_ids: List[int] = field(default_factory=list)
    written: List[Path] = field(default_factory=list)
    skipped: List[Path] = field(default_factory=list)
    failed_ids: List[int] = field(default_factory=list)
    error: str = ""

    @property
    def ok(self) -> bool:
        return not self.error


@dataclass
class CrawlSummary:
    cycles: List[CycleResult] = field(default_factory=list)

    @property
    def tokens(self) -> List[str]:
        return [c.token for c in self.cycles]

    @property
    def failed_cycles(self) -> int:
        return sum(1 for c in self.cycles if not c.ok)

    @property
    def entities_written(self) -> int:
        return sum(len(c.written) for c in self.cycles)

    @property
    def entities_skipped(self) -> int:
        return sum(len(c.skipped) for c in self.cycles)
