"""
Global configuration for nyscrawl.
Only infrastructure knobs live here (paths, URLs, timeouts, payload constants).
Clients and the runner receive a `RegistryConfig` value built from these.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Final, Optional, Tuple

from dotenv import load_dotenv

from .core.errors import ConfigError

load_dotenv()

# -----------------------------------------------------------------------------
# Storage roots
# -----------------------------------------------------------------------------
# XDG cache location: ~/.cache/nyscrawl (or $XDG_CACHE_HOME/nyscrawl)
_XDG_CACHE_HOME = Path(os.getenv("XDG_CACHE_HOME", Path.home() / ".cache"))
CACHE_DIR = _XDG_CACHE_HOME / "nyscrawl"

_DEFAULT_OUTPUT_DIR = "assets"
OUTPUT_DIR: Final[Path] = Path(
    os.getenv("NYSCRAWL_OUTPUT_DIR", _DEFAULT_OUTPUT_DIR)
)
OUTPUT_DIR_MODE: Final[int] = 0o755

COVERAGE_FILE: Final[Path] = CACHE_DIR / "token_coverage.jsonl"


# -----------------------------------------------------------------------------
# Filename builders
# -----------------------------------------------------------------------------
def _join(base_dir: Optional[Path], fname: str) -> Path:
    return (base_dir / fname) if base_dir else Path(fname)


def search_results_filename(
    token: str, *, base_dir: Optional[Path] = None
) -> Path:
    """One-shot search output, e.g. search_resultsabc.json"""
    return _join(base_dir, f"search_results{token}.json")


def api_search_filename(token: str, *, base_dir: Optional[Path] = None) -> Path:
    """Crawl search output, e.g. api_search_abc.json"""
    return _join(base_dir, f"api_search_{token}.json")


def business_data_filename(
    dos_id: int, *, base_dir: Optional[Path] = None
) -> Path:
    """Entity detail output, e.g. business_data_123.json"""
    return _join(base_dir, f"business_data_{int(dos_id)}.json")


# -----------------------------------------------------------------------------
# HTTP
# -----------------------------------------------------------------------------
def _int_env(name: str, default: str) -> int:
    raw = os.getenv(name, default)
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from None


DEFAULT_TIMEOUT_S: Final[int] = _int_env("NYSCRAWL_TIMEOUT_S", "45")
_DEFAULT_USER_AGENT = "nyscrawl (NY DOS public inquiry enumerator)"
USER_AGENT: Final[str] = os.getenv("NYSCRAWL_USER_AGENT", _DEFAULT_USER_AGENT)

# -----------------------------------------------------------------------------
# Registry endpoints / payload constants; overridden by .env vars
# -----------------------------------------------------------------------------
_DEFAULT_SEARCH_URL = (
    "https://apps.dos.ny.gov/PublicInquiryWeb/api/PublicInquiry/GetComplexSearchMatchingEntities"
)
_DEFAULT_DETAIL_URL = (
    "https://apps.dos.ny.gov/PublicInquiryWeb/api/PublicInquiry/GetEntityRecordByID"
)
SEARCH_URL: Final[str] = os.getenv("NYSCRAWL_SEARCH_URL", _DEFAULT_SEARCH_URL)
DETAIL_URL: Final[str] = os.getenv("NYSCRAWL_DETAIL_URL", _DEFAULT_DETAIL_URL)

ENTITY_TYPES: Final[Tuple[str, ...]] = (
    "Corporation",
    "LimitedLiabilityCompany",
    "LimitedPartnership",
    "LimitedLiabilityPartnership",
)
PAGE_SIZE: Final[int] = _int_env("NYSCRAWL_PAGE_SIZE", "50")

# Enumeration
TOKEN_LENGTH: Final[int] = 3
DEFAULT_ITERATIONS: Final[int] = _int_env("NYSCRAWL_ITERATIONS", "1000")


def get_env(
    name: str, *, required: bool = False, default: Optional[str] = None
) -> Optional[str]:
    """Small helper to fetch env vars with an optional 'required' flag."""
    val = os.getenv(name, default)
    if required and not val:
        raise ConfigError(f"Missing required environment variable: {name}")
    return val


def _default_headers() -> Dict[str, str]:
    return {
        "Accept": "application/json",
        "Content-Type": "application/json",
        "User-Agent": os.getenv("NYSCRAWL_USER_AGENT", _DEFAULT_USER_AGENT),
    }


@dataclass(frozen=True)
class RegistryConfig:
    """
    Everything a client or the runner needs to know about the registry and
    the output tree. Build with `RegistryConfig.from_env()` or directly in
    tests.
    """

    search_url: str = SEARCH_URL
    detail_url: str = DETAIL_URL
    entity_types: Tuple[str, ...] = ENTITY_TYPES
    list_start_record: int = 1
    list_end_record: int = PAGE_SIZE
    output_dir: Path = OUTPUT_DIR
    output_dir_mode: int = OUTPUT_DIR_MODE
    timeout_s: float = DEFAULT_TIMEOUT_S
    headers: Dict[str, str] = field(default_factory=_default_headers)
    # Persist bodies of non-2xx responses anyway (the legacy behavior).
    keep_error_bodies: bool = False

    def __post_init__(self) -> None:
        start, end = self.list_start_record, self.list_end_record
        if start < 1 or end < start:
            raise ConfigError(f"invalid result window: {start}..{end}")
        if not self.entity_types:
            raise ConfigError("entity_types must not be empty")
        object.__setattr__(self, "output_dir", Path(self.output_dir))

    @classmethod
    def from_env(cls, **overrides) -> "RegistryConfig":
        """
        Read the NYSCRAWL_* environment at call time, then apply overrides.
        None-valued overrides are ignored.
        """
        fields = {
            "search_url": os.getenv("NYSCRAWL_SEARCH_URL", _DEFAULT_SEARCH_URL),
            "detail_url": os.getenv("NYSCRAWL_DETAIL_URL", _DEFAULT_DETAIL_URL),
            "list_end_record": _int_env("NYSCRAWL_PAGE_SIZE", "50"),
            "output_dir": Path(
                os.getenv("NYSCRAWL_OUTPUT_DIR", _DEFAULT_OUTPUT_DIR)
            ),
            "timeout_s": _int_env("NYSCRAWL_TIMEOUT_S", "45"),
        }
        fields.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**fields)


# -----------------------------------------------------------------------------
# Public exports
# -----------------------------------------------------------------------------
__all__ = [
    # roots
    "CACHE_DIR",
    "OUTPUT_DIR",
    "OUTPUT_DIR_MODE",
    "COVERAGE_FILE",
    # builders
    "search_results_filename",
    "api_search_filename",
    "business_data_filename",
    # http
    "DEFAULT_TIMEOUT_S",
    "USER_AGENT",
    # registry
    "SEARCH_URL",
    "DETAIL_URL",
    "ENTITY_TYPES",
    "PAGE_SIZE",
    "TOKEN_LENGTH",
    "DEFAULT_ITERATIONS",
    # helpers
    "get_env",
    "RegistryConfig",
]
