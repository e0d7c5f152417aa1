"""nyscrawl: brute-force enumerator for the NY DOS business-entity inquiry API."""

__version__ = "0.1.0"
