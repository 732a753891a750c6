from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Body, HTTPException, Request

from cadastro.domain.errors import (
    AlreadyActiveError,
    AlreadyInactiveError,
    ClientError,
    ClientNotFoundError,
    ClientValidationError,
    DuplicateTaxIdError,
    StoreUnavailableError,
)
from cadastro.services.client_service import ClientService

router = APIRouter(prefix="/clients", tags=["clients"])

_STATUS_BY_ERROR = (
    (ClientValidationError, 400),
    (ClientNotFoundError, 404),
    (DuplicateTaxIdError, 409),
    (AlreadyActiveError, 409),
    (AlreadyInactiveError, 409),
    (StoreUnavailableError, 503),
)


def _get_client_service(request: Request) -> ClientService:
    svc = getattr(getattr(request.app, "state", None), "client_service", None)
    if not svc:
        raise RuntimeError("ClientService nao configurado")
    return svc


def _http_error(exc: ClientError) -> HTTPException:
    status = next((code for kind, code in _STATUS_BY_ERROR if isinstance(exc, kind)), 500)
    return HTTPException(status, {"code": exc.code, "message": exc.message})


@router.get("")
def list_clients(
    request: Request,
    name: str = "",
    city: str = "",
    active: Optional[bool] = None,
    sort: str = "",
    limit: int = 0,
):
    svc = _get_client_service(request)
    by_name = sort == "name"
    try:
        if name or city:
            records = svc.find_by_name(name, sort_by_name=by_name) if name else svc.find_by_city(city)
            if active is not None:
                records = [r for r in records if r.active == active]
            if limit > 0:
                records = records[:limit]
        else:
            records = svc.list_clients(active=active, sort_by_name=by_name, limit=limit)
    except ClientError as exc:
        raise _http_error(exc)
    return {"count": len(records), "clients": [r.to_dict() for r in records]}


@router.get("/stats")
def client_stats(request: Request):
    svc = _get_client_service(request)
    try:
        stats = svc.statistics()
    except ClientError as exc:
        raise _http_error(exc)
    return {
        "total": stats.total,
        "active": stats.active,
        "inactive": stats.inactive,
        "with_email": stats.with_email,
        "with_phone": stats.with_phone,
        "latest": stats.latest.to_dict() if stats.latest else None,
    }


@router.get("/{identifier}")
def get_client(identifier: str, request: Request):
    svc = _get_client_service(request)
    try:
        return svc.find(identifier).to_dict()
    except ClientError as exc:
        raise _http_error(exc)


@router.post("", status_code=201)
def create_client(payload: dict, request: Request):
    svc = _get_client_service(request)
    try:
        record = svc.create(
            payload.get("name"),
            payload.get("tax_id"),
            email=payload.get("email"),
            phone=payload.get("phone"),
            address=payload.get("address"),
        )
    except ClientError as exc:
        raise _http_error(exc)
    return record.to_dict()


@router.post("/bulk")
def create_clients_bulk(request: Request, payload: list = Body(...)):
    svc = _get_client_service(request)
    try:
        result = svc.create_many(payload)
    except ClientError as exc:
        raise _http_error(exc)
    return {
        "created": len(result.created),
        "failed": len(result.failed),
        "clients": [r.to_dict() for r in result.created],
        "errors": [
            {"index": f.index, "code": f.error.code, "message": f.error.message} for f in result.failed
        ],
    }


@router.patch("/{identifier}")
def update_client(identifier: str, payload: dict, request: Request):
    svc = _get_client_service(request)
    try:
        return svc.update(identifier, payload).to_dict()
    except ClientError as exc:
        raise _http_error(exc)


@router.delete("/{identifier}")
def remove_client(identifier: str, request: Request, hard: bool = False):
    svc = _get_client_service(request)
    try:
        result = svc.remove(identifier, hard=hard)
    except ClientError as exc:
        raise _http_error(exc)
    return {"hard": result.hard, "client": result.record.to_dict()}


@router.post("/{identifier}/reactivate")
def reactivate_client(identifier: str, request: Request):
    svc = _get_client_service(request)
    try:
        return svc.reactivate(identifier).to_dict()
    except ClientError as exc:
        raise _http_error(exc)
