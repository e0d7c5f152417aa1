from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer

from .config import COVERAGE_FILE, DEFAULT_ITERATIONS, RegistryConfig
from .coverage import TokenCoverage
from .registry.client import DosRegistryClient
from .runner import crawl_token, fetch_entity, run_crawl, run_search_cycle
from .terms import is_valid_token, token_space_size

app = typer.Typer(help="nyscrawl: NY DOS public inquiry enumerator")

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


def setup_logging(debug: bool = False, log_file: Optional[Path] = None) -> None:
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file is not None:
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )


def _config(
    output_dir: Optional[Path], keep_error_bodies: bool
) -> RegistryConfig:
    return RegistryConfig.from_env(
        output_dir=output_dir, keep_error_bodies=keep_error_bodies or None
    )


def _check_token(token: Optional[str]) -> Optional[str]:
    if token is None:
        return None
    token = token.lower()
    if not is_valid_token(token):
        raise typer.BadParameter(
            "token must be 3 letters a-z", param_hint="--token"
        )
    return token


@app.command("search")
def search(
    token: Optional[str] = typer.Option(
        None, help="Search token (default: random 3 letters)"
    ),
    output_dir: Optional[Path] = typer.Option(
        None, "--output-dir", help="Where JSON files are written"
    ),
    keep_error_bodies: bool = typer.Option(
        False, help="Persist bodies of non-2xx responses too"
    ),
    debug: bool = typer.Option(False, help="Verbose request diagnostics"),
    log_file: Optional[Path] = typer.Option(None, help="Also log to this file"),
):
    """Run one search and write/append search_results<token>.json."""
    setup_logging(debug, log_file)
    cfg = _config(output_dir, keep_error_bodies)
    with DosRegistryClient(cfg, debug=debug) as client:
        res = run_search_cycle(client, token=_check_token(token), config=cfg)
    if res.search_file is not None:
        typer.echo(str(res.search_file))
    return None


@app.command("crawl")
def crawl(
    iterations: int = typer.Option(
        DEFAULT_ITERATIONS,
        help="Number of search cycles (0 = all, with --exhaustive)",
    ),
    token: Optional[str] = typer.Option(
        None, help="Crawl this single token instead of looping"
    ),
    output_dir: Optional[Path] = typer.Option(
        None, "--output-dir", help="Where JSON files are written"
    ),
    exhaustive: bool = typer.Option(
        False, help="Walk aaa..zzz in order instead of random draws"
    ),
    track: bool = typer.Option(
        False, help="Record tried tokens in the coverage ledger"
    ),
    skip_tried: bool = typer.Option(
        False, help="Only try tokens missing from the coverage ledger"
    ),
    ledger: Path = typer.Option(COVERAGE_FILE, help="Coverage ledger path"),
    refetch: bool = typer.Option(
        False, help="Fetch again even if the output file exists"
    ),
    keep_error_bodies: bool = typer.Option(
        False, help="Persist bodies of non-2xx responses too"
    ),
    debug: bool = typer.Option(False, help="Verbose request diagnostics"),
    log_file: Optional[Path] = typer.Option(None, help="Also log to this file"),
):
    """Search tokens and fetch every entity record they turn up."""
    if iterations < 0 or (iterations == 0 and not exhaustive):
        raise typer.BadParameter(
            "must be positive (0 is allowed only with --exhaustive)",
            param_hint="--iterations",
        )
    setup_logging(debug, log_file)
    cfg = _config(output_dir, keep_error_bodies)
    coverage = TokenCoverage(ledger) if (track or skip_tried) else None
    with DosRegistryClient(cfg, debug=debug) as client:
        if token is not None:
            cycle = crawl_token(
                client, _check_token(token), config=cfg, refetch=refetch
            )
            if coverage is not None and cycle.ok:
                coverage.mark_tried(
                    cycle.token,
                    status=cycle.search_status,
                    found=len(cycle.dos_ids),
                )
            found, written = len(cycle.dos_ids), len(cycle.written)
            typer.echo(f"{cycle.token}\t{found}\t{written}")
            return None
        summary = run_crawl(
            client,
            iterations=iterations,
            config=cfg,
            coverage=coverage,
            skip_tried=skip_tried,
            exhaustive=exhaustive,
            refetch=refetch,
        )
    typer.echo(
        f"cycles={len(summary.cycles)} written={summary.entities_written} "
        f"skipped={summary.entities_skipped} failed={summary.failed_cycles}"
    )
    return None


@app.command("detail")
def detail(
    dos_id: int = typer.Argument(..., min=0, help="Registry dosID"),
    output_dir: Optional[Path] = typer.Option(
        None, "--output-dir", help="Where JSON files are written"
    ),
    refetch: bool = typer.Option(
        False, help="Fetch again even if the output file exists"
    ),
    keep_error_bodies: bool = typer.Option(
        False, help="Persist bodies of non-2xx responses too"
    ),
    debug: bool = typer.Option(False, help="Verbose request diagnostics"),
):
    """Fetch one entity record into business_data_<id>.json."""
    setup_logging(debug)
    cfg = _config(output_dir, keep_error_bodies)
    with DosRegistryClient(cfg, debug=debug) as client:
        res = fetch_entity(client, dos_id, config=cfg, refetch=refetch)
    for p in res.written + res.skipped:
        typer.echo(str(p))
    return None


@app.command("coverage")
def coverage(
    ledger: Path = typer.Option(COVERAGE_FILE, help="Coverage ledger path"),
):
    """Show how much of the token space the ledger has covered."""
    cov = TokenCoverage(ledger)
    total = token_space_size()
    done = len(cov)
    typer.echo(f"{done}/{total} tokens tried ({100.0 * done / total:.2f}%)")


def main() -> None:
    app()


if __name__ == "__main__":
    app()
