"""
HTTP entry point for the client registry.

Run with ``uvicorn --factory cadastro.app:create_app``.
"""
from __future__ import annotations

from typing import Optional

from fastapi import FastAPI, HTTPException, Request

from cadastro.core.config import get_settings
from cadastro.core.logging import configure_logging
from cadastro.domain.errors import StoreUnavailableError
from cadastro.routers import clients as clients_router
from cadastro.services.client_service import ClientService


def create_app(service: Optional[ClientService] = None) -> FastAPI:
    """Factory compatível com uvicorn/gunicorn."""
    settings = get_settings()
    configure_logging(settings.log_level, json_logs=settings.log_json)

    app = FastAPI(title="Cadastro de Clientes API")
    app.state.client_service = service or ClientService()
    app.include_router(clients_router.router)

    @app.get("/health")
    def health(request: Request):
        svc: ClientService = request.app.state.client_service
        try:
            svc.store.ping()
        except StoreUnavailableError as exc:
            raise HTTPException(503, {"code": exc.code, "message": exc.message})
        return {"ok": True, "backend": svc.store.backend}

    return app
