from __future__ import annotations

import base64
import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional

import jsonpatch
import typer
import yaml

from addca.admission.errors import AdmissionError
from addca.common.config import ConfigError, load_config

from .engine import mutate

app = typer.Typer(help="Run the trust-bundle injection on an AdmissionReview offline.")


@app.command()
def review(
    source: str = typer.Argument(..., help="AdmissionReview JSON file, or '-' for stdin."),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Optional YAML file overriding the CA_* environment settings.",
    ),
    apply: bool = typer.Option(
        False,
        "--apply",
        help="Print the embedded object with the patch applied (YAML) instead of the response.",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log request and response bodies."),
) -> None:
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )
    try:
        injector_config = load_config(config)
    except ConfigError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc

    body = _read_source(source)
    try:
        mutated = mutate(body, injector_config, verbose=verbose)
    except AdmissionError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc

    if not mutated:
        typer.echo("AdmissionReview carries no request; nothing to do", err=True)
        return

    if not apply:
        typer.echo(mutated.decode("utf-8"))
        return

    patched = _apply_response(json.loads(body), json.loads(mutated))
    typer.echo(yaml.safe_dump(patched, sort_keys=False), nl=False)


def _read_source(source: str) -> bytes:
    if source == "-":
        return sys.stdin.buffer.read()
    try:
        return Path(source).read_bytes()
    except OSError as exc:
        raise typer.BadParameter(f"unable to read {source}: {exc}") from exc


def _apply_response(request_review: dict, response_review: dict) -> Any:
    obj = request_review["request"].get("object") or {}
    patch_ops = json.loads(base64.b64decode(response_review["response"]["patch"]))
    try:
        return jsonpatch.apply_patch(obj, patch_ops, in_place=False)
    except (jsonpatch.JsonPatchException, jsonpatch.JsonPointerException) as exc:
        typer.echo(f"patch does not apply: {exc}", err=True)
        raise typer.Exit(code=1) from exc


if __name__ == "__main__":
    app()
