"""
Core exports for nyscrawl.
"""

from .contracts import CrawlSummary, CycleResult, FetchResult
from .errors import ConfigError, NyscrawlError, TokenGenerationError
from .interfaces import RegistryClient

__all__ = [
    "FetchResult",
    "CycleResult",
    "CrawlSummary",
    "RegistryClient",
    "NyscrawlError",
    "ConfigError",
    "TokenGenerationError",
]
