import json
import os
from typing import Any, Dict, List, Optional

import pytest

# Load .env if present, but don't fail if it's missing.
try:
    from dotenv import load_dotenv

    load_dotenv()
except ImportError:
    pass

from nyscrawl.config import RegistryConfig
from nyscrawl.core.contracts import FetchResult

# ---- mode & env flags -------------------------------------------------------


def _truthy(s: str | None) -> bool:
    return str(s).strip().lower() in {"1", "true", "yes", "on"}


LIVE = _truthy(os.getenv("NYSCRAWL_LIVE_TESTS"))

SEARCH_URL = "https://registry.test/GetComplexSearchMatchingEntities"
DETAIL_URL = "https://registry.test/GetEntityRecordByID"

SAMPLE_SEARCH = json.dumps(
    {
        "entitySearchResultList": [
            {"dosID": "123"},
            {"dosID": "abc"},
            {"dosID": "456"},
        ]
    }
).encode()


def detail_body(dos_id: int) -> bytes:
    return json.dumps({"entityGeneralInfo": {"dosID": str(dos_id)}}).encode()


# =============================================================================
# STUB REGISTRY (offline)
# =============================================================================


class StubRegistry:
    """
    RegistryClient double. Canned search bodies by token (default
    SAMPLE_SEARCH) and detail bodies by id (default detail_body(id)).
    """

    def __init__(
        self,
        *,
        search: Optional[Dict[str, FetchResult]] = None,
        details: Optional[Dict[int, FetchResult]] = None,
    ) -> None:
        self.search = search or {}
        self.details = details or {}
        self.search_calls: List[str] = []
        self.detail_calls: List[int] = []

    def search_entities(self, term: str) -> FetchResult:
        self.search_calls.append(term)
        return self.search.get(
            term, FetchResult(url=SEARCH_URL, status=200, body=SAMPLE_SEARCH)
        )

    def entity_record(self, dos_id: int) -> FetchResult:
        self.detail_calls.append(dos_id)
        return self.details.get(
            dos_id,
            FetchResult(url=DETAIL_URL, status=200, body=detail_body(dos_id)),
        )

    def close(self) -> None:
        pass


@pytest.fixture
def registry_config(tmp_path) -> RegistryConfig:
    return RegistryConfig(
        search_url=SEARCH_URL,
        detail_url=DETAIL_URL,
        output_dir=tmp_path / "assets",
    )


@pytest.fixture
def stub_registry() -> StubRegistry:
    return StubRegistry()


# =============================================================================
# CLIENT FIXTURE
# =============================================================================


@pytest.fixture
def dos_client(registry_config):
    """
    Client fixture:
      - Offline (default): DosRegistryClient with its _post stubbed.
      - Live (NYSCRAWL_LIVE_TESTS=1): real client against the real registry.
    """
    from nyscrawl.registry.client import DosRegistryClient

    if LIVE:
        c = DosRegistryClient(
            RegistryConfig(output_dir=registry_config.output_dir)
        )
        yield c
        c.close()
        return

    c = DosRegistryClient(registry_config)
    c.posted = []  # type: ignore[attr-defined]

    # Monkeypatch the instance method without touching the class.
    def _post_stub(url: str, payload: Dict[str, Any]) -> FetchResult:
        c.posted.append((url, payload))  # type: ignore[attr-defined]
        if url == SEARCH_URL:
            return FetchResult(url=url, status=200, body=SAMPLE_SEARCH)
        return FetchResult(
            url=url, status=200, body=detail_body(int(payload["SearchID"]))
        )

    c._post = _post_stub  # type: ignore[attr-defined]
    yield c
    c.close()


# =============================================================================
# PYTEST MARKER HANDLING
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    # Register a 'live' marker for any tests that explicitly want real I/O.
    config.addinivalue_line("markers", "live: test requires live API access")


def pytest_runtest_setup(item: pytest.Item) -> None:
    # If a test is marked live but we're not in LIVE mode, skip it proactively.
    if "live" in item.keywords and not LIVE:
        pytest.skip("live test skipped (NYSCRAWL_LIVE_TESTS not enabled)")
