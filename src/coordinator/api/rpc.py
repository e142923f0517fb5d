"""
JSON-RPC 2.0 surface.

``POST /rpc`` accepts a single call or a batch. Each call is bound to one of
the six coordinator operations, its params validated by a pydantic model
(by name or by position), and the ``OperationResult`` turned into either a
``result`` or an ``error`` member.

Architecture:
    ::

        POST /rpc body
            │  json.loads ── fails ──► -32700 PARSE_ERROR
            ▼
        single object / non-empty array
            │  RpcRequest.model_validate ── fails ──► -32600 INVALID_REQUEST
            ▼
        METHODS[method] ── missing ──► -32601 METHOD_NOT_FOUND
            │  params → ParamsModel ── fails ──► -32602 INVALID_PARAMS
            ▼
        ops function(ctx, ...) → OperationResult
            │  success → {"result": ...}
            └─ failure → {"error": {"code": ERROR_CODE_TO_RPC[code], "data": {"kind": code, ...}}}

Notifications (no ``id``) run but produce no response; a batch made only of
notifications yields HTTP 204.

Tags:
    json-rpc, api, dispatch, coordinator

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import json
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from starlette.concurrency import run_in_threadpool

from coordinator.core.logging import LogContext, get_logger
from coordinator.ops import profiles as profile_ops
from coordinator.ops import tasks as task_ops
from coordinator.ops.context import OperationContext
from coordinator.ops.requests import (
    CreateProfileRequest,
    CreateTaskRequest,
    ListProfilesRequest,
    ListTasksRequest,
)
from coordinator.ops.result import OperationResult

from .deps import OpContext
from .schemas import (
    CreateProfileParams,
    CreateTaskParams,
    FetchByIdParams,
    ListProfilesParams,
    ListTasksParams,
    ProfileOut,
    RpcErrorObject,
    RpcParams,
    RpcRequest,
    TaskOut,
)

logger = get_logger(__name__)

# ── Error code → JSON-RPC fault code ─────────────────────────────────────

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

ERROR_CODE_TO_RPC: dict[str, int] = {
    "PARSE_ERROR": PARSE_ERROR,
    "INVALID_REQUEST": INVALID_REQUEST,
    "METHOD_NOT_FOUND": METHOD_NOT_FOUND,
    "INVALID_PARAMS": INVALID_PARAMS,
    "VALIDATION_FAILED": INVALID_PARAMS,
    "INTERNAL": INTERNAL_ERROR,
    "NOT_FOUND": -32001,
    "CONFLICT": -32002,
    "RESOURCE_EXHAUSTED": -32003,
    "STORE_UNAVAILABLE": -32004,
    "DATA_CORRUPTED": -32005,
}


def rpc_code_for_error(code: str) -> int:
    """Resolve an ops error code to a JSON-RPC fault code, defaulting to -32603."""
    return ERROR_CODE_TO_RPC.get(code, INTERNAL_ERROR)


class RpcFault(Exception):
    """Raised inside the dispatcher to short-circuit into an error response."""

    def __init__(self, kind: str, message: str, *, retryable: bool = False, **details: Any):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.retryable = retryable
        self.details = details

    def to_error(self) -> RpcErrorObject:
        return RpcErrorObject(
            code=rpc_code_for_error(self.kind),
            message=self.message,
            data={"kind": self.kind, "retryable": self.retryable, **self.details},
        )


def _error_response(id_: Any, error: RpcErrorObject) -> dict[str, Any]:
    return {"jsonrpc": "2.0", "error": error.model_dump(exclude_none=True), "id": id_}


def _result_response(id_: Any, result: Any) -> dict[str, Any]:
    return {"jsonrpc": "2.0", "result": result, "id": id_}


# ── Method table ─────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class RpcMethod:
    """One callable method: params model, ops call, result marshaller."""

    params_model: type[RpcParams]
    call: Callable[[OperationContext, Any], OperationResult[Any]]
    marshal: Callable[[Any], Any] = lambda data: data


def _ids(data: list[int]) -> list[int]:
    return [int(i) for i in data]


METHODS: dict[str, RpcMethod] = {
    "create_profile": RpcMethod(
        CreateProfileParams,
        lambda ctx, p: profile_ops.create_profile(
            ctx, CreateProfileRequest(base=p.base, name=p.name, json=p.json_)
        ),
        int,
    ),
    "list_profiles": RpcMethod(
        ListProfilesParams,
        lambda ctx, p: profile_ops.list_profiles(ctx, ListProfilesRequest(by_base=p.by_base)),
        _ids,
    ),
    "fetch_profile": RpcMethod(
        FetchByIdParams,
        lambda ctx, p: profile_ops.fetch_profile(ctx, p.id),
        lambda profile: ProfileOut.from_profile(profile).model_dump(by_alias=True),
    ),
    "create_task": RpcMethod(
        CreateTaskParams,
        lambda ctx, p: task_ops.create_task(
            ctx, CreateTaskRequest(profile=p.profile, file_name=p.file_name, data=p.data)
        ),
        int,
    ),
    "list_tasks": RpcMethod(
        ListTasksParams,
        lambda ctx, p: task_ops.list_tasks(ctx, ListTasksRequest(by_profile=p.by_profile)),
        _ids,
    ),
    "fetch_task": RpcMethod(
        FetchByIdParams,
        lambda ctx, p: task_ops.fetch_task(ctx, p.id),
        lambda task: TaskOut.from_task(task).model_dump(),
    ),
}


# ── Dispatcher ───────────────────────────────────────────────────────────


class RpcDispatcher:
    """Turns a raw request body into a JSON-RPC response payload.

    Synchronous by design: the HTTP route runs it on a worker thread so
    blocking store calls never stall the event loop.
    """

    def __init__(self, methods: dict[str, RpcMethod] | None = None):
        self.methods = methods if methods is not None else METHODS

    def handle_body(self, body: bytes, ctx: OperationContext) -> Any:
        """Return the response payload (dict, list) or ``None`` when nothing is owed."""
        try:
            payload = json.loads(body)
        except (ValueError, UnicodeDecodeError) as e:
            return _error_response(None, RpcFault("PARSE_ERROR", f"Parse error: {e}").to_error())

        if isinstance(payload, list):
            if not payload:
                return _error_response(
                    None, RpcFault("INVALID_REQUEST", "Empty batch").to_error()
                )
            responses = [self.handle_call(item, ctx) for item in payload]
            responses = [r for r in responses if r is not None]
            return responses or None

        return self.handle_call(payload, ctx)

    def handle_call(self, raw: Any, ctx: OperationContext) -> dict[str, Any] | None:
        """Handle one call object. Returns ``None`` for notifications."""
        if not isinstance(raw, dict):
            return _error_response(
                None, RpcFault("INVALID_REQUEST", "Request must be a JSON object").to_error()
            )

        try:
            call = RpcRequest.model_validate(raw)
        except PydanticValidationError as e:
            # an invalid object is answered even without an id
            id_ = raw.get("id") if isinstance(raw.get("id"), (int, str)) else None
            fault = RpcFault("INVALID_REQUEST", "Invalid request", errors=_errors(e))
            return _error_response(id_, fault.to_error())

        is_notification = "id" not in raw

        with LogContext(rpc_method=call.method):
            try:
                result = self._invoke(call, ctx)
            except RpcFault as fault:
                logger.info("rpc_fault", kind=fault.kind, message=fault.message)
                response = _error_response(call.id, fault.to_error())
            except Exception as exc:
                logger.exception("rpc_unhandled", error=str(exc))
                fault = RpcFault("INTERNAL", "Internal error")
                response = _error_response(call.id, fault.to_error())
            else:
                response = _result_response(call.id, result)

        return None if is_notification else response

    def _invoke(self, call: RpcRequest, ctx: OperationContext) -> Any:
        method = self.methods.get(call.method)
        if method is None:
            raise RpcFault("METHOD_NOT_FOUND", f"Method not found: {call.method}", method=call.method)

        params = self._bind_params(method.params_model, call.params)
        outcome = method.call(ctx, params)
        if not outcome.success:
            err = outcome.error
            assert err is not None
            raise RpcFault(err.code, err.message, retryable=err.retryable, **err.details)

        logger.debug("rpc_ok", elapsed_ms=round(outcome.elapsed_ms, 2))
        return method.marshal(outcome.data)

    @staticmethod
    def _bind_params(model: type[RpcParams], params: dict[str, Any] | list[Any] | None) -> BaseModel:
        if params is None:
            params = {}
        if isinstance(params, list):
            names = model.positional_names()
            if len(params) > len(names):
                raise RpcFault(
                    "INVALID_PARAMS",
                    f"Expected at most {len(names)} positional params, got {len(params)}",
                )
            params = dict(zip(names, params, strict=False))
        try:
            return model.model_validate(params)
        except PydanticValidationError as e:
            raise RpcFault("INVALID_PARAMS", "Invalid params", errors=_errors(e)) from e


def _errors(exc: PydanticValidationError) -> list[dict[str, Any]]:
    return [
        {"loc": ".".join(str(p) for p in err["loc"]), "msg": err["msg"], "type": err["type"]}
        for err in exc.errors()
    ]


# ── Router ───────────────────────────────────────────────────────────────


def create_rpc_router(path: str = "/rpc") -> APIRouter:
    """Router exposing the dispatcher at ``POST {path}``."""
    router = APIRouter(tags=["rpc"])
    dispatcher = RpcDispatcher()

    @router.post(path)
    async def rpc_endpoint(request: Request, ctx: OpContext) -> Response:
        body = await request.body()
        payload = await run_in_threadpool(dispatcher.handle_body, body, ctx)
        if payload is None:
            return Response(status_code=204)
        return JSONResponse(content=payload)

    return router


__all__ = [
    "ERROR_CODE_TO_RPC",
    "METHODS",
    "RpcDispatcher",
    "RpcFault",
    "RpcMethod",
    "create_rpc_router",
    "rpc_code_for_error",
]
