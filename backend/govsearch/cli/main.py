"""CLI entrypoint for govsearch."""

from __future__ import annotations

import json
import os
from typing import Optional

import requests
import typer
import uvicorn

app = typer.Typer(name="govs", help="govsearch command-line interface")

DEFAULT_HOST = "http://127.0.0.1:5000"


def _resolve_host(override: Optional[str]) -> str:
    if override:
        return override.rstrip('/')
    env_host = os.environ.get("GOVS_HOST")
    if env_host:
        return env_host.rstrip('/')
    return DEFAULT_HOST


def _request(method: str, path: str, host: Optional[str] = None, **kwargs) -> requests.Response:
    base = _resolve_host(host)
    url = f"{base}{path}"
    resp = requests.request(method, url, timeout=300, **kwargs)
    if not resp.ok:
        try:
            detail = resp.json()
        except ValueError:
            detail = resp.text
        typer.echo(f"Request failed ({resp.status_code}): {detail}", err=True)
        raise typer.Exit(code=1)
    return resp


def _echo(resp: requests.Response) -> None:
    typer.echo(json.dumps(resp.json(), indent=2))


@app.command()
def search(
    q: str = typer.Argument(..., help="Query text"),
    limit: int = typer.Option(20, "--limit", help="Number of results to return"),
    category: Optional[str] = typer.Option(None, "--category", help="Only return this category"),
    source: Optional[str] = typer.Option(None, "--source", help="Only return this source"),
    host: Optional[str] = typer.Option(None, "--host", help="Override backend host"),
) -> None:
    """Search the index."""
    params: dict[str, object] = {"q": q, "limit": limit}
    if category:
        params["category"] = category
    if source:
        params["source"] = source
    _echo(_request("GET", "/api/search", host=host, params=params))


@app.command()
def stats(
    host: Optional[str] = typer.Option(None, "--host", help="Override backend host"),
) -> None:
    """Show record counts and breakdowns."""
    _echo(_request("GET", "/api/data/stats", host=host))


@app.command()
def refresh(
    host: Optional[str] = typer.Option(None, "--host", help="Override backend host"),
) -> None:
    """Re-fetch every source and rebuild the index."""
    _echo(_request("POST", "/api/data/refresh", host=host))


@app.command("add-url")
def add_url(
    url: str = typer.Argument(..., help="Resource URL"),
    title: str = typer.Option(..., "--title", help="Resource title"),
    description: str = typer.Option(..., "--description", help="Short description"),
    source: str = typer.Option("External URL", "--source", help="Publishing organisation"),
    tags: str = typer.Option("", "--tags", help="Comma separated tags"),
    host: Optional[str] = typer.Option(None, "--host", help="Override backend host"),
) -> None:
    """Add a link to an external resource."""
    payload = {
        "url": url,
        "title": title,
        "description": description,
        "source": source,
        "tags": tags,
    }
    _echo(_request("POST", "/api/ingest/url", host=host, json=payload))


@app.command()
def crawl(
    url: str = typer.Argument(..., help="Seed URL"),
    source: str = typer.Option(..., "--source", help="Label for crawled records"),
    tag: list[str] = typer.Option([], "--tag", help="Tag applied to every crawled record"),
    max_depth: Optional[int] = typer.Option(None, "--max-depth", help="Depth bound (1-5)"),
    host: Optional[str] = typer.Option(None, "--host", help="Override backend host"),
) -> None:
    """Crawl a website into documents and sections."""
    payload: dict[str, object] = {"url": url, "source": source, "tags": tag}
    if max_depth is not None:
        payload["max_depth"] = max_depth
    _echo(_request("POST", "/api/ingest/crawl", host=host, json=payload))


@app.command()
def serve(
    bind: str = typer.Option("127.0.0.1", "--bind", help="Interface to listen on"),
    port: int = typer.Option(5000, "--port", help="Port to listen on"),
) -> None:
    """Run the HTTP API."""
    uvicorn.run("govsearch.app:app", host=bind, port=port)


if __name__ == "__main__":
    app()
