"""
API errors and the two JSON envelopes.

Route families answer in one of two shapes:

* plain:   ``{"id": ...}`` / ``{"message": ...}`` / documents, errors as ``{"error": ..., "code": ...}``
* success: ``{"success": true, "data": ...}``, errors as ``{"success": false, "message": ...}``
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Dict, Iterator, Optional, Tuple

from flask import Flask, Response, has_request_context, jsonify, request
from pymongo.errors import PyMongoError
from werkzeug.exceptions import HTTPException

logger = logging.getLogger(__name__)


@dataclass
class ApiError(Exception):
    message: str
    status: int = 400
    code: str = "bad_request"
    details: Optional[Any] = None

    def __str__(self) -> str:
        return self.message


@dataclass
class ValidationError(ApiError):
    status: int = 400
    code: str = "validation_error"


@dataclass
class NotFound(ApiError):
    status: int = 404
    code: str = "not_found"


@dataclass
class Conflict(ApiError):
    status: int = 409
    code: str = "conflict"


@dataclass
class StoreError(ApiError):
    status: int = 500
    code: str = "store_error"


@dataclass
class GatewayError(ApiError):
    status: int = 502
    code: str = "gateway_error"


@contextmanager
def store_errors(message: str) -> Iterator[None]:
    """Re-raise any PyMongo failure as a StoreError carrying only ``message``."""
    try:
        yield
    except PyMongoError:
        rid = request.environ.get("request_id", "") if has_request_context() else ""
        logger.exception("%s (request_id=%s)", message, rid)
        raise StoreError(message)


# -------------------------
# Envelopes
# -------------------------
def ok(payload: Any = None, status: int = 200) -> Tuple[Response, int]:
    return jsonify(payload if payload is not None else {}), status


def fail(err: ApiError) -> Tuple[Response, int]:
    data: Dict[str, Any] = {"error": err.message, "code": err.code}
    if err.details:
        data["errors"] = err.details
    return jsonify(data), err.status


def success(data: Any = None, status: int = 200) -> Tuple[Response, int]:
    return jsonify({"success": True, "data": data}), status


def failure(err: ApiError) -> Tuple[Response, int]:
    body: Dict[str, Any] = {"success": False, "message": err.message}
    if err.details:
        body["errors"] = err.details
    return jsonify(body), err.status


def require_json(expect: type = dict) -> Any:
    if not request.is_json:
        raise ApiError("Request must be JSON.", 415, "unsupported_media_type")
    data = request.get_json(silent=True)
    if data is None:
        raise ApiError("Invalid JSON payload.", 400, "invalid_json")
    if not isinstance(data, expect):
        kind = "an array" if expect is list else "an object"
        raise ApiError(f"JSON body must be {kind}.", 400, "invalid_json")
    return data


def use_success_envelope(bp) -> None:
    """Render ApiErrors raised inside ``bp`` in the success envelope."""
    bp.register_error_handler(ApiError, failure)


# -------------------------
# App-wide handlers
# -------------------------
def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(ApiError)
    def handle_api_error(err: ApiError):
        return fail(err)

    @app.errorhandler(HTTPException)
    def handle_http_error(err: HTTPException):
        if err.code == 404:
            return jsonify({"error": "Not found.", "code": "not_found"}), 404
        if err.code == 405:
            return jsonify({"error": "Method not allowed.", "code": "method_not_allowed"}), 405
        return jsonify({"error": err.description, "code": "http_error"}), err.code

    @app.errorhandler(Exception)
    def handle_exception(e: Exception):
        rid = request.environ.get("request_id", "")
        logger.exception("Unhandled error (request_id=%s): %s", rid, e)
        return (
            jsonify(
                {
                    "error": "Internal server error.",
                    "code": "internal_error",
                    "request_id": rid,
                }
            ),
            500,
        )
