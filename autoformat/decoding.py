"""Uniform request body decoding.

Handlers accept JSON and HTML form posts through the same code path:

    @router.post("/echo")
    async def echo(payload: EchoIn = Depends(auto_input(EchoIn))):
        ...

The Content-Type header must match a supported media type exactly (letter
case aside); parameters such as ``; charset=utf-8`` are not accepted.
"""

from collections.abc import AsyncIterator, Awaitable, Callable
from functools import lru_cache
from typing import Any, TypeVar, get_origin

from fastapi import Request
from pydantic import BaseModel, TypeAdapter, ValidationError
from starlette.datastructures import FormData, Headers
from starlette.formparsers import FormParser

from autoformat.exceptions import FormDecodeError, JsonDecodeError, UnsupportedContentType
from autoformat.logging_config import get_logger, log_with_context

logger = get_logger(__name__)

T = TypeVar("T")

JSON_CONTENT_TYPE = "application/json"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

SEQUENCE_ORIGINS = (list, set, frozenset, tuple)


@lru_cache(maxsize=256)
def _adapter(shape: Any) -> TypeAdapter:
    return TypeAdapter(shape)


def _summarize(error: ValidationError) -> str:
    parts = []
    for item in error.errors(include_url=False):
        location = ".".join(str(part) for part in item["loc"]) or "body"
        parts.append(f"{location}: {item['msg']}")
    return "; ".join(parts)


def _error_details(error: ValidationError) -> dict[str, Any]:
    return {
        "errors": [
            {"loc": list(item["loc"]), "msg": item["msg"], "type": item["type"]}
            for item in error.errors(include_url=False)
        ]
    }


def decode_json(body: bytes, shape: Any) -> Any:
    """Decode a JSON body into ``shape``.

    Validation is strict: JSON types must match the shape, so ``"1"`` is not
    accepted for an ``int`` field.

    Raises:
        JsonDecodeError: 400 when the body is not JSON, 422 when it does not fit the shape
    """
    try:
        return _adapter(shape).validate_json(body, strict=True)
    except ValidationError as e:
        if any(item["type"] == "json_invalid" for item in e.errors(include_url=False)):
            raise JsonDecodeError(
                f"Failed to parse the request body as JSON: {_summarize(e)}",
                status_code=400,
                details=_error_details(e),
            ) from e
        raise JsonDecodeError(
            f"Failed to deserialize the JSON body into the target type: {_summarize(e)}",
            status_code=422,
            details=_error_details(e),
        ) from e


async def _single_chunk(body: bytes) -> AsyncIterator[bytes]:
    if body:
        yield body
    # Empty chunk tells FormParser to finalize
    yield b""


async def parse_form(body: bytes) -> FormData:
    """Parse an urlencoded body with Starlette's form parser.

    Raises:
        UnicodeDecodeError: If the raw body is not ASCII (urlencoded bodies
            carry non-ASCII text as percent-escapes)
    """
    body.decode("ascii")
    return await FormParser(Headers({"content-type": FORM_CONTENT_TYPE}), _single_chunk(body)).parse()


def _sequence_keys(shape: Any) -> set[str]:
    """Form keys that map to list/set/tuple fields of a model ``shape``."""
    if not (isinstance(shape, type) and issubclass(shape, BaseModel)):
        return set()
    return {
        field.alias or name
        for name, field in shape.model_fields.items()
        if get_origin(field.annotation) in SEQUENCE_ORIGINS
    }


def form_fields(form: FormData, shape: Any) -> dict[str, Any]:
    """Flatten form data for validation.

    Sequence fields always get every value of their key. Other keys get their
    single value, or every value when the key was sent more than once so that
    validation rejects the duplicate.
    """
    sequences = _sequence_keys(shape)
    fields: dict[str, Any] = {}
    for key in form.keys():
        values = form.getlist(key)
        fields[key] = values if key in sequences or len(values) > 1 else values[0]
    return fields


async def decode_form(body: bytes, shape: Any) -> Any:
    """Decode an application/x-www-form-urlencoded body into ``shape``.

    Raises:
        FormDecodeError: 400 when the body is undecodable, 422 when it does not fit the shape
    """
    try:
        form = await parse_form(body)
    except UnicodeDecodeError as e:
        raise FormDecodeError(f"Failed to decode the form body: {e}", status_code=400) from e

    try:
        return _adapter(shape).validate_python(form_fields(form, shape))
    except ValidationError as e:
        raise FormDecodeError(
            f"Failed to deserialize the form body into the target type: {_summarize(e)}",
            status_code=422,
            details=_error_details(e),
        ) from e


async def decode_input(body: bytes, content_type: str | None, shape: Any) -> Any:
    """Decode a request body according to its Content-Type.

    Args:
        body: Raw request body
        content_type: Content-Type header value, or None when absent
        shape: Target type (pydantic model, dataclass, dict[...] ...)

    Returns:
        The decoded value, validated against ``shape``

    Raises:
        JsonDecodeError: For application/json bodies that fail to decode
        FormDecodeError: For form bodies that fail to decode
        UnsupportedContentType: For any other or missing Content-Type
    """
    normalized = content_type.lower() if content_type is not None else None

    if normalized == JSON_CONTENT_TYPE:
        return decode_json(body, shape)
    if normalized == FORM_CONTENT_TYPE:
        return await decode_form(body, shape)

    log_with_context(
        logger,
        "debug",
        "Rejected request body with unsupported content type",
        content_type=content_type,
        event_type="input_unsupported_content_type",
    )
    raise UnsupportedContentType(content_type)


def auto_input(shape: type[T]) -> Callable[[Request], Awaitable[T]]:
    """FastAPI dependency factory decoding the request body into ``shape``.

    Example:
        @router.post("/items")
        async def create(item: Item = Depends(auto_input(Item))):
            ...
    """

    async def dependency(request: Request) -> T:
        body = await request.body()
        return await decode_input(body, request.headers.get("content-type"), shape)

    return dependency
