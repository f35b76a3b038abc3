
"""CLI implementation for objectfetcher."""

import asyncio
import json
import sys
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

import typer

from . import fetch_objects, fetch_objects_sync
from .core.model import FetchConfig, FetchResult
from .core.util import result_asdict
from .io.http_async import close_global_client

app = typer.Typer(add_completion=False, help="Convert XML from files and URLs into JSON records.")


def iter_sources(files: list[str]) -> list[str]:
    """Get list of sources from files argument or stdin."""
    if "-" in files:
        # stdin mode
        stdin_lines = [ln.strip() for ln in sys.stdin if ln.strip()]
        if not stdin_lines:
            return []
        return stdin_lines
    elif files:
        return list(files)
    return []


async def _batch_fetch(sources: list[str], data: Optional[str], config: FetchConfig) -> list[FetchResult]:
    """Asynchronously fetch records from a list of sources."""
    tasks = [fetch_objects(src, data=data, config=config) for src in sources]
    try:
        results = await asyncio.gather(*tasks, return_exceptions=True)
    finally:
        # the shared client is bound to this event loop
        await close_global_client()
    processed_results = []
    for res in results:
        if isinstance(res, Exception):
            processed_results.append(FetchResult(success=False, objects=None, error=str(res), bytes_fetched=0))
        else:
            processed_results.append(res)
    return processed_results


@app.command()
def main(
    files: list[str] = typer.Argument(None, help="Files or URLs to process, or '-' for stdin"),
    wrapper: bool = typer.Option(False, "--wrapper", help="Root element only wraps the records"),
    skip_first: bool = typer.Option(False, "--skip-first", help="Drop the first record"),
    data: Optional[str] = typer.Option(None, "--data", help="POST this request body to URL sources"),
    text_key: str = typer.Option("#text", "--text-key", help="Key for text next to attributes/children"),
    keep_whitespace: bool = typer.Option(False, "--keep-whitespace", help="Do not trim element text"),
    fields: Optional[str] = typer.Option(None, "--fields", help="Comma-separated subset of record keys to emit"),
    jsonl: bool = typer.Option(False, "--jsonl", help="Force JSON-lines output"),
    output: Optional[Path] = typer.Option(None, "-o", "--output", help="Write to PATH instead of stdout"),
    sync: bool = typer.Option(False, "--sync", help="Force synchronous I/O"),
    timeout: float = typer.Option(60.0, "--timeout", min=0, help="Transport timeout in seconds"),
):
    """Fetch XML from one or many local paths or URLs and print the records."""
    sel_fields = set(fields.split(",")) if fields else None
    sources = iter_sources(files or [])

    if not sources:
        typer.echo("No input files given.", err=True)
        raise typer.Exit(code=1)

    config = FetchConfig(
        has_wrapper_tag=wrapper,
        skip_first=skip_first,
        text_key=text_key,
        strip_whitespace=not keep_whitespace,
        timeout=timeout,
    )

    results: list[FetchResult] = []
    if sync:
        for src in sources:
            try:
                # Check if src is a URL
                parsed_url = urlparse(src)
                if parsed_url.scheme and parsed_url.netloc:  # It's a URL
                    res = fetch_objects_sync(src, data=data, config=config)
                else:  # It's a local path
                    res = fetch_objects_sync(str(Path(src).resolve()), data=data, config=config)
            except Exception as e:
                res = FetchResult(success=False, objects=None, error=str(e), bytes_fetched=0)
            results.append(res)
    else:
        results = asyncio.run(_batch_fetch(sources, data, config))

    # open output sink
    sink = open(output, "w", encoding="utf-8") if output else sys.stdout
    try:
        # choose output style
        if len(sources) == 1 and not jsonl:
            obj = result_asdict(results[0], fields=sel_fields)
            json.dump(obj, sink, indent=2, ensure_ascii=False)
            sink.write("\n")
        else:
            for res in results:
                obj = result_asdict(res, fields=sel_fields)
                sink.write(json.dumps(obj, ensure_ascii=False))
                sink.write("\n")
    finally:
        if output:
            sink.close()

    # exit code
    if any(not r.success for r in results):
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
