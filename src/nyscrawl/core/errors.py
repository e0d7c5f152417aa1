from __future__ import annotations


class NyscrawlError(Exception):
    """Base class for errors raised by nyscrawl."""


class ConfigError(NyscrawlError):
    """Bad configuration value (env var, config field)."""


class TokenGenerationError(NyscrawlError):
    """The system entropy source failed while drawing a search token."""
