from __future__ import annotations

import html
import json
import logging
from functools import lru_cache
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.responses import PlainTextResponse, Response

from addca.admission.errors import AdmissionError
from addca.common.config import InjectorConfig
from addca.mutate.engine import mutate

logger = logging.getLogger(__name__)


@lru_cache()
def get_injector_config() -> InjectorConfig:
    return InjectorConfig.from_env()


def create_app(config: Optional[InjectorConfig] = None, verbose: bool = False) -> FastAPI:
    app = FastAPI(
        title="CA Certificates Injector",
        description="Mutating admission webhook mounting the cluster trust bundle into Pods and Jobs.",
        version="0.1.0",
    )
    if config is not None:
        app.dependency_overrides[get_injector_config] = lambda: config

    @app.post("/mutate")
    async def mutate_review(
        request: Request,
        injector_config: InjectorConfig = Depends(get_injector_config),
    ) -> Response:
        body = await request.body()
        try:
            mutated = mutate(body, injector_config, verbose=verbose)
        except AdmissionError as exc:
            logger.error("%s", exc)
            return PlainTextResponse(str(exc), status_code=500)
        return Response(content=mutated, media_type="application/json")

    @app.get("/{path:path}")
    def liveness(path: str) -> PlainTextResponse:
        return PlainTextResponse(f"hello {json.dumps(html.escape('/' + path))}")

    return app


app = create_app()


__all__ = ["app", "create_app", "get_injector_config"]
