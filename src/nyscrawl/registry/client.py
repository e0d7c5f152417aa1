from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests

from ..config import RegistryConfig
from ..core.contracts import FetchResult
from ..core.interfaces import RegistryClient
from .http import make_session, safe_post
from .payloads import build_detail_payload, build_search_payload

logger = logging.getLogger(__name__)


class DosRegistryClient(RegistryClient):
    """
    NY Department of State Public Inquiry client.

    Endpoints:
      POST {search_url}   # GetComplexSearchMatchingEntities
      POST {detail_url}   # GetEntityRecordByID

    Notes:
      - One synchronous request per call; no retries, no pacing.
      - Both methods return a FetchResult and never raise on transport
        errors. A non-2xx status is reported via FetchResult.ok, not hidden.
    """

    def __init__(
        self,
        config: Optional[RegistryConfig] = None,
        *,
        session: Optional[requests.Session] = None,
        debug: bool = False,
    ) -> None:
        self.config = config or RegistryConfig.from_env()
        self._session = session or make_session(self.config)
        self._timeout = self.config.timeout_s
        self._debug = bool(debug)

    def __enter__(self) -> "DosRegistryClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self._session.close()

    # helpers ------------------------------------------------------------
    def _post(self, url: str, payload: Dict[str, Any]) -> FetchResult:
        return safe_post(
            self._session,
            url,
            payload,
            timeout=self._timeout,
            debug=self._debug,
        )

    # RegistryClient methods ---------------------------------------------
    def search_entities(self, term: str) -> FetchResult:
        """Entities whose name contains `term` (first result window only)."""
        payload = build_search_payload(term, self.config)
        logger.info("searching registry for %r", term)
        return self._post(self.config.search_url, payload)

    def entity_record(self, dos_id: int) -> FetchResult:
        payload = build_detail_payload(dos_id)
        logger.info("fetching entity record %s", dos_id)
        return self._post(self.config.detail_url, payload)
