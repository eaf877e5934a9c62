"""Typer CLI for CertLedger."""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

app = typer.Typer(name="certledger", help="CertLedger: document hash issuance and verification")
console = Console()


def _admin_headers(api_key: str, user_id: str) -> dict[str, str]:
    return {
        "X-CertLedger-Api-Key": api_key,
        "X-User-Id": user_id,
        "X-User-Role": "super_admin",
    }


def _post(url: str, path: str, api_key: str, user_id: str, payload: dict | None = None) -> dict:
    import httpx

    resp = httpx.post(
        f"{url}{path}", json=payload, headers=_admin_headers(api_key, user_id), timeout=30,
    )
    data = resp.json()
    if resp.status_code >= 400:
        console.print(f"[bold red]{data.get('code', resp.status_code)}[/bold red] — {data.get('error', data)}")
        raise typer.Exit(1)
    return data


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, help="Bind host (default: CERTLEDGER_HOST)"),
    port: Optional[int] = typer.Option(None, help="Bind port (default: CERTLEDGER_PORT)"),
):
    """Start the CertLedger API server."""
    import uvicorn
    from certledger.app import create_app
    from certledger.common.config import get_settings

    settings = get_settings()
    host = host or settings.host
    port = port or settings.port
    console.print(f"[bold green]Starting CertLedger on {host}:{port}[/bold green]")
    uvicorn.run(create_app(), host=host, port=port)


@app.command("hash")
def hash_file(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Document to hash"),
):
    """Print the SHA-256 metadata hash of a document (offline)."""
    from certledger.storage.files import sha256_file

    console.print(f"[bold]{sha256_file(path)}[/bold]")


@app.command()
def verify(
    doc_hash: str = typer.Argument(..., help="Metadata hash to look up"),
    url: str = typer.Option("http://localhost:8080", help="Server URL"),
):
    """Check whether a document hash is anchored on the ledger."""
    import httpx

    resp = httpx.get(f"{url}/certificates/verify/{doc_hash}", timeout=30)
    data = resp.json()
    if resp.status_code >= 400:
        console.print(f"[bold red]{data.get('code')}[/bold red] — {data.get('error')}")
        raise typer.Exit(1)

    if data["issued"]:
        console.print("[bold green]ISSUED[/bold green]")
        table = Table(show_header=False)
        for key, value in (data.get("value") or {}).items():
            table.add_row(key, str(value))
        console.print(table)
    else:
        console.print("[bold yellow]NOT ISSUED[/bold yellow]")
        raise typer.Exit(1)


@app.command("init-contract")
def init_contract(
    url: str = typer.Option("http://localhost:8080", help="Server URL"),
    api_key: str = typer.Option(..., envvar="CERTLEDGER_API_KEY", help="Shared API key"),
    user_id: str = typer.Option("cli", help="Acting super-admin user id"),
):
    """Initialise the registry contract with the service account as owner."""
    data = _post(url, "/ledger/init", api_key, user_id)
    console.print(f"[bold green]{data['status']}[/bold green] — tx {data.get('hash')}")


@app.command()
def whitelist(
    address: str = typer.Argument(..., help="Ledger address to whitelist"),
    url: str = typer.Option("http://localhost:8080", help="Server URL"),
    api_key: str = typer.Option(..., envvar="CERTLEDGER_API_KEY", help="Shared API key"),
    user_id: str = typer.Option("cli", help="Acting super-admin user id"),
):
    """Whitelist an address so it may store documents."""
    data = _post(url, "/ledger/whitelist", api_key, user_id, {"address": address})
    console.print(f"[bold green]{data['status']}[/bold green] — tx {data.get('hash')}")


@app.command()
def health(
    url: str = typer.Option("http://localhost:8080", help="Server URL"),
):
    """Check CertLedger server health."""
    import httpx

    try:
        resp = httpx.get(f"{url}/health", timeout=5)
        data = resp.json()
        console.print(
            f"[bold green]{data['status']}[/bold green] — v{data['version']} "
            f"(ledger: {data['ledger_backend']})"
        )
    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
