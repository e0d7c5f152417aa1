from __future__ import annotations

import logging
import secrets
from pathlib import Path
from typing import Iterator, List, Optional, Set

from .config import (
    DEFAULT_ITERATIONS,
    TOKEN_LENGTH,
    RegistryConfig,
    api_search_filename,
    business_data_filename,
    search_results_filename,
)
from .core.contracts import CrawlSummary, CycleResult, FetchResult
from .core.interfaces import RegistryClient
from .coverage import TokenCoverage
from .registry.parse import dos_ids_from_document, extract_dos_ids
from .storage import (
    already_fetched,
    ensure_output_dir,
    iter_documents,
    write_or_append,
)
from .terms import all_tokens, generate_token

logger = logging.getLogger(__name__)


def _usable(res: FetchResult, config: RegistryConfig) -> bool:
    """2xx with a body, or any readable body when keep_error_bodies is set."""
    if res.body is None:
        return False
    return res.ok or config.keep_error_bodies


def _failure_text(res: FetchResult) -> str:
    if res.body is None:
        return res.error or "no response body"
    return f"HTTP {res.status}"


def run_search_cycle(
    client: RegistryClient,
    *,
    token: Optional[str] = None,
    config: Optional[RegistryConfig] = None,
) -> CycleResult:
    """
    One-shot search: draw (or take) a token, search, and write or append the
    response to search_results<token>.json. Detail records are not fetched.
    """
    config = config or RegistryConfig.from_env()
    token = token or generate_token()
    out = CycleResult(token=token)

    res = client.search_entities(token)
    out.search_status = res.status
    if not _usable(res, config):
        out.error = _failure_text(res)
        logger.error("Failed to retrieve data from URL (%s)", out.error)
        return out

    base = ensure_output_dir(config.output_dir, config.output_dir_mode)
    path = search_results_filename(token, base_dir=base)
    if write_or_append(path, res.body):
        out.search_file = path
    else:
        out.error = f"could not write {path}"
    return out


def fetch_entity(
    client: RegistryClient,
    dos_id: int,
    *,
    config: Optional[RegistryConfig] = None,
    refetch: bool = False,
) -> CycleResult:
    """Fetch and persist one entity record (business_data_<id>.json)."""
    config = config or RegistryConfig.from_env()
    out = CycleResult(token="", dos_ids=[int(dos_id)])
    base = ensure_output_dir(config.output_dir, config.output_dir_mode)
    _fetch_detail(
        client, int(dos_id), config=config, base=base, out=out, refetch=refetch
    )
    return out


def _fetch_detail(
    client: RegistryClient,
    dos_id: int,
    *,
    config: RegistryConfig,
    base: Path,
    out: CycleResult,
    refetch: bool,
) -> None:
    path = business_data_filename(dos_id, base_dir=base)
    if already_fetched(path) and not refetch:
        logger.debug("skipping %s: already on disk", path)
        out.skipped.append(path)
        return

    res = client.entity_record(dos_id)
    if not _usable(res, config):
        logger.error(
            "failed to fetch entity %s (%s)", dos_id, _failure_text(res)
        )
        out.failed_ids.append(dos_id)
        return
    if write_or_append(path, res.body):
        out.written.append(path)
    else:
        out.failed_ids.append(dos_id)


def _stored_dos_ids(path: Path) -> List[int]:
    """Unique dosIDs across every search response logged in `path`."""
    seen: Set[int] = set()
    out: List[int] = []
    for doc in iter_documents(path):
        for dos_id in dos_ids_from_document(doc):
            if dos_id not in seen:
                seen.add(dos_id)
                out.append(dos_id)
    return out


def crawl_token(
    client: RegistryClient,
    token: str,
    *,
    config: Optional[RegistryConfig] = None,
    refetch: bool = False,
) -> CycleResult:
    """
    Search `token`, persist the response to api_search_<token>.json, then
    fetch every extracted dosID not already on disk into
    business_data_<id>.json.

    A token whose search file exists is not searched again unless
    `refetch`; its ids are read back from that file instead, so details that
    failed on an earlier run are retried. A failed search aborts the cycle;
    a failed detail fetch aborts only that id.
    """
    config = config or RegistryConfig.from_env()
    out = CycleResult(token=token)
    base = ensure_output_dir(config.output_dir, config.output_dir_mode)

    search_path = api_search_filename(token, base_dir=base)
    if already_fetched(search_path) and not refetch:
        logger.info("not searching %r: %s already exists", token, search_path)
        out.search_skipped = True
        out.search_file = search_path
        out.dos_ids = _stored_dos_ids(search_path)
        for dos_id in out.dos_ids:
            _fetch_detail(
                client,
                dos_id,
                config=config,
                base=base,
                out=out,
                refetch=False,
            )
        return out

    res = client.search_entities(token)
    out.search_status = res.status
    if not _usable(res, config):
        out.error = _failure_text(res)
        logger.error("search for %r failed (%s)", token, out.error)
        return out

    if write_or_append(search_path, res.body):
        out.search_file = search_path
    else:
        out.error = f"could not write {search_path}"

    out.dos_ids = extract_dos_ids(res.body)
    if not out.dos_ids:
        logger.info("no entities found for %r", token)
        return out

    logger.info("found %d entities for %r", len(out.dos_ids), token)
    for dos_id in out.dos_ids:
        _fetch_detail(
            client, dos_id, config=config, base=base, out=out, refetch=refetch
        )
    return out


def _token_stream(
    *,
    iterations: int,
    length: int,
    coverage: Optional[TokenCoverage],
    skip_tried: bool,
    exhaustive: bool,
) -> Iterator[str]:
    # iterations <= 0 means uncapped, which only terminates in exhaustive mode
    if exhaustive:
        if coverage is not None and skip_tried:
            source = coverage.untried(length)
        else:
            source = all_tokens(length)
        for i, tok in enumerate(source):
            if 0 < iterations <= i:
                return
            yield tok
        return

    if iterations <= 0:
        raise ValueError("random crawl needs a positive iteration count")
    if coverage is None or not skip_tried:
        for _ in range(iterations):
            yield generate_token(length)
        return

    pool = list(coverage.untried(length))
    for _ in range(iterations):
        if not pool:
            logger.info("token space exhausted; nothing left to try")
            return
        i = secrets.randbelow(len(pool))
        pool[i], pool[-1] = pool[-1], pool[i]
        yield pool.pop()


def run_crawl(
    client: RegistryClient,
    *,
    iterations: int = DEFAULT_ITERATIONS,
    config: Optional[RegistryConfig] = None,
    coverage: Optional[TokenCoverage] = None,
    skip_tried: bool = False,
    exhaustive: bool = False,
    refetch: bool = False,
    length: int = TOKEN_LENGTH,
) -> CrawlSummary:
    """
    Bounded enumeration: `iterations` cycles of crawl_token().

    Tokens are random draws by default (repeats possible). With `exhaustive`
    the token space is walked in lexicographic order instead. When a
    `coverage` ledger is given every cycle is recorded in it, and
    `skip_tried` restricts draws to tokens it has not seen.
    """
    config = config or RegistryConfig.from_env()
    summary = CrawlSummary()
    stream = _token_stream(
        iterations=iterations,
        length=length,
        coverage=coverage,
        skip_tried=skip_tried,
        exhaustive=exhaustive,
    )
    for n, token in enumerate(stream, 1):
        cycle = crawl_token(client, token, config=config, refetch=refetch)
        summary.cycles.append(cycle)
        if coverage is not None and cycle.ok:
            coverage.mark_tried(
                token, status=cycle.search_status, found=len(cycle.dos_ids)
            )
        logger.debug("cycle %d (%r): %d ids", n, token, len(cycle.dos_ids))

    logger.info(
        "crawl done: %d cycles, %d entities written, %d skipped, %d failed cycles",
        len(summary.cycles),
        summary.entities_written,
        summary.entities_skipped,
        summary.failed_cycles,
    )
    return summary
