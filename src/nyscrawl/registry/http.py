from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

import requests

from ..config import RegistryConfig
from ..core.contracts import FetchResult

logger = logging.getLogger(__name__)


def make_session(config: Optional[RegistryConfig] = None) -> requests.Session:
    config = config or RegistryConfig()
    s = requests.Session()
    s.headers.update(config.headers)
    return s


def safe_post(
    session: requests.Session,
    url: str,
    payload: Dict[str, Any],
    *,
    timeout: Optional[float] = None,
    debug: bool = False,
) -> FetchResult:
    """
    POST `payload` as JSON and return a FetchResult. Never raises for
    request or network failures (status -1) or body-read failures (status
    kept, body None).
    """
    try:
        r = session.post(url, json=payload, timeout=timeout)
    except requests.RequestException as e:
        logger.error("POST %s failed: %s", url, e)
        return FetchResult(url=url, status=-1, error=f"{type(e).__name__}: {e}")

    try:
        status = r.status_code
        try:
            body = r.content
        except (requests.RequestException, OSError) as e:
            logger.error("reading body from %s failed: %s", url, e)
            return FetchResult(
                url=url, status=status, error=f"{type(e).__name__}: {e}"
            )
    finally:
        r.close()

    res = FetchResult(url=url, status=status, body=body)
    if debug:
        logger.debug("[POST] url=%s status=%s", url, status)
        logger.debug("[POST] payload=%s", json.dumps(payload)[:400])
        logger.debug("[POST] body=%s", res.snippet[:400])
    if not res.ok:
        logger.warning("POST %s -> HTTP %s: %s", url, status, res.snippet)
    return res
