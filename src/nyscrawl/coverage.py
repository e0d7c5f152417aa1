from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterator, List, Optional

from .config import COVERAGE_FILE, TOKEN_LENGTH
from .terms import all_tokens

logger = logging.getLogger(__name__)

# Append-only ledger of search tokens already tried, one JSON record per line:
#   {"token": "abc", "status": 200, "found": 12}
# Later lines for the same token win when loading.
#
# NOTE: intentionally simple; single process, no locking. Upgrade to sqlite
# if/when needed.


@dataclass(frozen=True)
class TokenRecord:
    token: str
    status: int
    found: int


class TokenCoverage:
    def __init__(self, path: Optional[Path] = None) -> None:
        self.path = Path(path) if path else COVERAGE_FILE
        self._loaded = False
        self._mem: Dict[str, TokenRecord] = {}

    def _load(self) -> None:
        if self._loaded:
            return
        if not self.path.exists():
            self._loaded = True
            return
        with self.path.open("r", encoding="utf-8") as fh:
            for n, line in enumerate(fh, 1):
                line = line.strip()
                if not line:
                    continue
                try:
                    rec = json.loads(line)
                    tok = str(rec["token"])
                    self._mem[tok] = TokenRecord(
                        token=tok,
                        status=int(rec.get("status", 0)),
                        found=int(rec.get("found", 0)),
                    )
                except (ValueError, KeyError, TypeError) as e:
                    logger.warning(
                        "%s:%d: bad ledger line: %s", self.path, n, e
                    )
                    continue
        self._loaded = True

    def get(self, token: str) -> Optional[TokenRecord]:
        self._load()
        return self._mem.get(token)

    def has_tried(self, token: str) -> bool:
        return self.get(token) is not None

    def mark_tried(
        self, token: str, *, status: int = 0, found: int = 0
    ) -> None:
        self._load()
        rec = TokenRecord(token=token, status=int(status), found=int(found))
        self._mem[token] = rec
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("a", encoding="utf-8") as fh:
            line = {
                "token": rec.token,
                "status": rec.status,
                "found": rec.found,
            }
            fh.write(json.dumps(line) + "\n")

    def tried(self) -> List[str]:
        self._load()
        return sorted(self._mem)

    def untried(self, length: int = TOKEN_LENGTH) -> Iterator[str]:
        """Tokens not yet in the ledger, in lexicographic order."""
        self._load()
        for tok in all_tokens(length):
            if tok not in self._mem:
                yield tok

    def __len__(self) -> int:
        self._load()
        return len(self._mem)
