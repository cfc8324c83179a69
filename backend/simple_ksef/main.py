import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from simple_ksef.api.middleware import RequestContextMiddleware
from simple_ksef.api.v1.router import router as v1_router
from simple_ksef.core.config import ServiceConfig
from simple_ksef.core.errors import DomainError, TokenValidationError
from simple_ksef.domain.fields import register_models
from simple_ksef.domain.schema import REQUEST_MODELS

log = logging.getLogger("simple_ksef.api")


def create_app(cfg: Optional[ServiceConfig] = None) -> FastAPI:
    cfg = cfg or ServiceConfig.from_env()
    log.setLevel(cfg.log_level)

    # Mistagged request models fail here, not on the first request.
    register_models(*REQUEST_MODELS)

    app = FastAPI(
        title="Simple KSeF API",
        description="API for issuing and managing KSeF invoices",
        version="0.1.0",
        openapi_url=None if cfg.is_production else "/openapi.json",
        docs_url=None if cfg.is_production else cfg.docs_path,
        redoc_url=None,
    )
    app.state.cfg = cfg

    app.add_middleware(RequestContextMiddleware)

    @app.exception_handler(TokenValidationError)
    def token_validation_error_handler(_, exc: TokenValidationError):
        return JSONResponse(
            status_code=400,
            content={"detail": [v.as_error() for v in exc.violations]},
        )

    @app.exception_handler(DomainError)
    def domain_error_handler(_, exc: DomainError):
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    app.include_router(v1_router, prefix="/api/v1")
    return app


def run() -> None:
    import os
    import uvicorn

    port = int(os.environ.get("PORT", 8000))
    reload = os.environ.get("RELOAD", "false").lower() == "true"

    uvicorn.run("simple_ksef.main:app", host="0.0.0.0", port=port, reload=reload)


app = create_app()

if __name__ == "__main__":  # pragma: no cover
    run()
