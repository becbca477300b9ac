from __future__ import annotations

import json
from typing import Any, Awaitable, Callable

from fastapi import APIRouter, Request
from loguru import logger
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from gkv.exceptions import KeyNotFoundError, MethodNotAllowedError, ValidationError
from gkv.store import GKV
from services.api.exception_handlers import INVALID_BODY
from services.api.schemas import EntryRequest, KeyRequest
from services.api.utils import get_store_factory, parse_namespace


router = APIRouter()

ROUTED_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def _reject_constant(name: str) -> Any:
    raise ValidationError(INVALID_BODY, {"constant": name})


async def _read_json(request: Request) -> Any:
    raw = await request.body()
    if not raw:
        raise ValidationError(INVALID_BODY)
    try:
        return json.loads(raw, parse_constant=_reject_constant)
    except ValueError as exc:
        raise ValidationError(INVALID_BODY) from exc


def _parse(model: type[BaseModel], body: Any) -> Any:
    try:
        return model.model_validate(body)
    except PydanticValidationError as exc:
        issues = [
            {"message": error["msg"], "path": list(error.get("loc", ()))}
            for error in exc.errors()
        ]
        raise ValidationError(INVALID_BODY, issues=issues) from exc


async def _get(store: GKV, body: Any) -> dict[str, Any]:
    request = _parse(KeyRequest, body)
    entry = await store.get(request.key)
    if not entry.found:
        raise KeyNotFoundError(f"Key not found: {request.key}", {"key": request.key})
    return entry.as_dict()


async def _put(store: GKV, body: Any) -> dict[str, Any]:
    request = _parse(EntryRequest, body)
    return (await store.set(request.key, request.value)).as_dict()


async def _patch(store: GKV, body: Any) -> dict[str, Any]:
    request = _parse(EntryRequest, body)
    return (await store.update(request.key, request.value)).as_dict()


async def _delete(store: GKV, body: Any) -> dict[str, Any]:
    request = _parse(KeyRequest, body)
    return (await store.delete(request.key)).as_dict()


HANDLERS: dict[str, Callable[[GKV, Any], Awaitable[dict[str, Any]]]] = {
    "GET": _get,
    "PUT": _put,
    "PATCH": _patch,
    "DELETE": _delete,
}


@router.api_route("/", methods=ROUTED_METHODS, tags=["kv"])
@router.api_route("/{path:path}", methods=ROUTED_METHODS, tags=["kv"])
async def kv_endpoint(request: Request, path: str = "") -> dict[str, Any]:
    handler = HANDLERS.get(request.method)
    if handler is None:
        raise MethodNotAllowedError(f"Method {request.method} is not supported", {"method": request.method})

    factory = get_store_factory(request)
    namespace_from_path = request.app.state.settings.http.namespace_from_path
    namespace = parse_namespace(path) if namespace_from_path else None
    store = factory.for_namespace(namespace)

    body = await _read_json(request)
    logger.debug(
        "{method} namespace={namespace}",
        method=request.method,
        namespace=store.namespace,
    )
    result = await handler(store, body)
    if namespace_from_path:
        result["namespace"] = store.namespace
    return result
