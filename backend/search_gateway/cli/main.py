"""CLI entrypoint for the search gateway."""

from __future__ import annotations

import json
import os
from typing import Optional

import requests
import typer

app = typer.Typer(name="sgw", help="Search gateway command-line interface")

DEFAULT_HOST = "http://127.0.0.1:3000"


def _resolve_host(override: Optional[str]) -> str:
    if override:
        return override.rstrip('/')
    env_host = os.environ.get("SGW_HOST_URL")
    if env_host:
        return env_host.rstrip('/')
    return DEFAULT_HOST


def _request(method: str, path: str, host: Optional[str] = None, **kwargs) -> requests.Response:
    base = _resolve_host(host)
    url = f"{base}{path}"
    resp = requests.request(method, url, timeout=60, **kwargs)
    if not resp.ok:
        try:
            detail = resp.json().get("error", resp.text)
        except ValueError:
            detail = resp.text
        typer.echo(f"Request failed ({resp.status_code}): {detail}", err=True)
        raise typer.Exit(code=1)
    return resp


def _search(path: str, body: dict[str, object], host: Optional[str]) -> None:
    resp = _request("POST", path, host=host, json=body)
    typer.echo(json.dumps(resp.json(), indent=2))


@app.command()
def keyword(
    q: str = typer.Argument(..., help="Query text"),
    tenant: Optional[str] = typer.Option(None, "--tenant", help="Tenant identifier"),
    host: Optional[str] = typer.Option(None, "--host", help="Override gateway URL"),
) -> None:
    """Run a BM25 keyword search."""
    body: dict[str, object] = {"query": q}
    if tenant:
        body["tenantId"] = tenant
    _search("/api/keyword-search", body, host)


@app.command()
def semantic(
    q: str = typer.Argument(..., help="Query text"),
    tenant: Optional[str] = typer.Option(None, "--tenant", help="Tenant identifier"),
    host: Optional[str] = typer.Option(None, "--host", help="Override gateway URL"),
) -> None:
    """Run a vector kNN search."""
    body: dict[str, object] = {"query": q}
    if tenant:
        body["tenantId"] = tenant
    _search("/api/semantic-search", body, host)


@app.command()
def hybrid(
    q: str = typer.Argument(..., help="Query text"),
    tenant: Optional[str] = typer.Option(None, "--tenant", help="Tenant identifier"),
    alpha: Optional[float] = typer.Option(None, "--alpha", help="Keyword weight; vector weight is 1 - alpha"),
    host: Optional[str] = typer.Option(None, "--host", help="Override gateway URL"),
) -> None:
    """Run a hybrid search fusing keyword and vector scores."""
    body: dict[str, object] = {"query": q}
    if tenant:
        body["tenantId"] = tenant
    if alpha is not None:
        body["alpha"] = alpha
    _search("/api/hybrid-search", body, host)


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address (defaults to config)"),
    port: Optional[int] = typer.Option(None, "--port", help="Bind port (defaults to config)"),
    reload: bool = typer.Option(False, "--reload", help="Enable auto-reload"),
) -> None:
    """Start the API server."""
    import uvicorn

    from search_gateway.core.config import get_settings

    settings = get_settings()
    bind_host = host or settings.host
    bind_port = port or settings.port
    typer.echo(f"Search gateway listening on http://{bind_host}:{bind_port}")
    uvicorn.run(
        "search_gateway.app:app",
        host=bind_host,
        port=bind_port,
        reload=reload,
        log_config=None,
    )


if __name__ == "__main__":
    app()
