from __future__ import annotations
import json
import typer
import httpx
from .client import A2AClient, RPCError
from .config import get_settings
from .card import agent_card

app = typer.Typer(add_completion=False, help="Customer Profiler Agent CLI")

SAMPLE_IDEA = "A sustainable fashion e-commerce platform targeting eco-conscious millennials"


def _client(url: str | None) -> A2AClient:
    s = get_settings()
    return A2AClient(url or s.public_url, rpc_path=s.rpc_path)


@app.command()
def serve(host: str = typer.Option(None, help="Bind address (default: HOST)"),
          port: int = typer.Option(None, help="Port (default: PORT)"),
          reload: bool = False):
    """Run the agent with uvicorn."""
    import uvicorn
    s = get_settings()
    uvicorn.run("customer_profiler.server:app", host=host or s.host, port=port or s.port, reload=reload)


@app.command()
def ask(idea: str, url: str = typer.Option(None, help="Agent base URL (default: PUBLIC_URL)"),
        direct: bool = typer.Option(False, help="Send a bare message instead of a JSON-RPC envelope")):
    """Send a business idea and print the generated profile."""
    try:
        typer.echo(_client(url).ask(idea, use_jsonrpc=not direct))
    except RPCError as e:
        typer.secho(f"RPC error {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)


@app.command()
def card():
    """Print the local agent card."""
    typer.echo(json.dumps(agent_card(), indent=2))


@app.command()
def check(url: str = typer.Option(None, help="Agent base URL (default: PUBLIC_URL)"),
          idea: str = SAMPLE_IDEA):
    """Smoke-test a running agent: health, agent card, one profile."""
    client = _client(url)
    failed = 0

    def _report(name: str, ok: bool, detail: str = "") -> None:
        nonlocal failed
        failed += 0 if ok else 1
        mark = typer.style("✓" if ok else "✗", fg=typer.colors.GREEN if ok else typer.colors.RED)
        typer.echo(f"{mark} {name}" + (f": {detail}" if detail else ""))

    try:
        _report("health", client.health())
    except httpx.HTTPError as e:
        _report("health", False, str(e))

    try:
        c = client.card()
        missing = [k for k in ("name", "description", "version", "capabilities", "endpoints") if k not in c]
        _report("agent card", not missing, f"missing {missing}" if missing else "")
    except (httpx.HTTPError, ValueError) as e:
        _report("agent card", False, str(e))

    try:
        resp = client.send(idea)
        state = client.task_state(resp)
        _report("profile", state == "completed", resp["error"]["message"] if "error" in resp else f"state={state}")
    except (httpx.HTTPError, ValueError) as e:
        _report("profile", False, str(e))

    if failed:
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
