from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
import uvicorn

from addca.common.config import (
    DEFAULT_PORT,
    DEFAULT_TLS_CERT_FILE,
    DEFAULT_TLS_KEY_FILE,
    ConfigError,
    load_config,
)

from .app import create_app

logger = logging.getLogger(__name__)

app = typer.Typer(help="Serve the trust-bundle injection webhook over HTTPS.")


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", "--host", help="Address to bind."),
    port: int = typer.Option(DEFAULT_PORT, "--port", "-p", min=1, max=65535, help="Port to bind."),
    cert: Path = typer.Option(
        Path(DEFAULT_TLS_CERT_FILE),
        "--cert",
        envvar="TLS_CERT_FILE",
        help="TLS certificate file.",
    ),
    key: Path = typer.Option(
        Path(DEFAULT_TLS_KEY_FILE),
        "--key",
        envvar="TLS_KEY_FILE",
        help="TLS private key file.",
    ),
    tls: bool = typer.Option(
        True,
        "--tls/--no-tls",
        help="Disable only for local testing; the API server requires HTTPS.",
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Optional YAML file overriding the CA_* environment settings.",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log request and response bodies."),
    log_level: str = typer.Option("INFO", "--log-level", help="Logging level."),
) -> None:
    logging.basicConfig(level=log_level.upper(), format="%(levelname)s: %(message)s")
    logger.info("Starting server ...")

    try:
        injector_config = load_config(config)
    except ConfigError as exc:
        logger.error("%s", exc)
        raise typer.Exit(code=1) from exc

    ssl_options = {}
    if tls:
        missing = [str(path) for path in (cert, key) if not path.exists()]
        if missing:
            logger.error("TLS files not found: %s (use --no-tls for local testing)", ", ".join(missing))
            raise typer.Exit(code=1)
        ssl_options = {"ssl_certfile": str(cert), "ssl_keyfile": str(key)}
        logger.info("Using TLS cert: %s, key: %s", cert, key)
    else:
        logger.warning("TLS disabled - not for production use")

    logger.info(
        "Injecting ConfigMap %s (key %s) as %s",
        injector_config.bundle_source_name,
        injector_config.bundle_key,
        injector_config.cert_file_name,
    )
    uvicorn.run(
        create_app(injector_config, verbose=verbose),
        host=host,
        port=port,
        timeout_keep_alive=10,
        log_level=log_level.lower(),
        **ssl_options,
    )


if __name__ == "__main__":
    app()
