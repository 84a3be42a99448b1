"""Typer CLI entrypoint for matching, function invocation and the HTTP server."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

import typer
import uvicorn
import yaml
from pydantic import ValidationError

from .container import create_container
from .errors import ConfigError, FunctionError
from .logging import configure_logging
from .pipeline import AuditLogger
from .schemas.config import load_config
from .storage import JsonSnapshotStore

app = typer.Typer(help="Candidate matching and recruiting pipeline CLI.")


def _load_settings(path: Optional[Path]) -> dict[str, Any]:
    if path is None:
        return {}
    with path.open("r", encoding="utf-8") as handle:
        loaded = yaml.safe_load(handle) or {}
    if not isinstance(loaded, dict):
        raise typer.BadParameter("Config file must be a YAML object", param_name="config")
    try:
        return load_config(loaded).to_settings()
    except ValidationError as exc:
        raise typer.BadParameter(str(exc), param_name="config") from exc


def _build_container(settings: dict[str, Any], **kwargs: Any):
    try:
        return create_container(settings=settings, **kwargs)
    except ConfigError as exc:
        raise typer.BadParameter(
            f"{exc} {'; '.join(exc.issues)}".strip(), param_name="config"
        ) from exc


@app.command()
def match(
    candidate: Path = typer.Option(..., exists=True, readable=True, dir_okay=False, help="Candidate JSON path."),
    jobs: Path = typer.Option(..., exists=True, readable=True, dir_okay=False, help="Jobs JSONL path."),
    output: Path = typer.Option(
        ...,
        exists=False,
        file_okay=True,
        dir_okay=False,
        resolve_path=True,
        help="Output JSON path.",
    ),
    as_of: Optional[str] = typer.Option(None, help="Reference date (ISO) for start-date checks."),
    config: Optional[Path] = typer.Option(None, exists=True, readable=True, dir_okay=False, help="YAML config path."),
    log_level: str = typer.Option("INFO", help="Log level for structured logging."),
    audit_log: Optional[Path] = typer.Option(None, dir_okay=False, help="Audit log output (JSONL)."),
) -> None:
    """Score one candidate against every job in a JSONL file."""
    settings = _load_settings(config)
    configure_logging(log_level)

    container = _build_container(settings)
    pipeline = container.pipeline()
    audit_logger = AuditLogger(audit_log) if audit_log else None

    results = pipeline.run(
        candidate_path=candidate,
        jobs_path=jobs,
        output_path=output,
        as_of=as_of,
        audit_logger=audit_logger,
    )
    typer.echo(f"Scored {len(results)} jobs. Results saved to {output}.")


@app.command()
def invoke(
    name: str = typer.Argument(..., help="Function name, e.g. calculate-match."),
    store: Path = typer.Option(..., dir_okay=False, help="JSON snapshot store (created if missing)."),
    payload: Optional[Path] = typer.Option(None, exists=True, readable=True, dir_okay=False, help="Request JSON path."),
    config: Optional[Path] = typer.Option(None, exists=True, readable=True, dir_okay=False, help="YAML config path."),
    log_level: str = typer.Option("WARNING", help="Log level for structured logging."),
) -> None:
    """Run one function handler against a snapshot store and save the store."""
    settings = _load_settings(config)
    configure_logging(log_level)

    request: dict[str, Any] = {}
    if payload is not None:
        try:
            request = json.loads(payload.read_text(encoding="utf-8")) or {}
        except json.JSONDecodeError as exc:
            raise typer.BadParameter(f"Invalid payload JSON: {exc}", param_name="payload") from exc
        if not isinstance(request, dict):
            raise typer.BadParameter("Payload must be a JSON object", param_name="payload")

    repository = JsonSnapshotStore.load(store)
    container = _build_container(settings, repository=repository)
    try:
        response = container.registry().invoke(name, request)
    except FunctionError as exc:
        typer.echo(json.dumps(exc.to_payload(), ensure_ascii=False, indent=2))
        raise typer.Exit(code=1) from exc

    JsonSnapshotStore.save(repository, store)
    typer.echo(json.dumps(response, ensure_ascii=False, indent=2, default=str))


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", help="Bind address."),
    port: int = typer.Option(8000, help="Bind port."),
    store: Optional[Path] = typer.Option(None, dir_okay=False, help="JSON snapshot store to load and save."),
    config: Optional[Path] = typer.Option(None, exists=True, readable=True, dir_okay=False, help="YAML config path."),
    log_level: str = typer.Option("INFO", help="Log level for structured logging."),
) -> None:
    """Serve the function and interview-response endpoints."""
    settings = _load_settings(config)
    configure_logging(log_level)

    repository = JsonSnapshotStore.load(store) if store else None
    container = _build_container(settings, repository=repository)
    try:
        uvicorn.run(container.api(), host=host, port=port, log_level=log_level.lower())
    finally:
        if store is not None:
            JsonSnapshotStore.save(container.repository(), store)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
