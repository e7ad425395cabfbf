"""
network_sdk.tier1_runtime.serialize
────────────────────────────────────
JSON codec for request bodies and response payloads.

Encodes Pydantic models, dicts and lists to compact JSON bytes and decodes
bytes into Pydantic models. Date fields use one fixed wire format
(default ``yyyy-MM-dd'T'HH:mm:ss.SSSZ``); models that want it on decode
inherit from ServiceModel.

Decode failures raise DecodeError, never the underlying pydantic/json
exception, so callers can tell them apart from transport failures.
"""
from __future__ import annotations

import json
import types
from datetime import datetime, timezone
from typing import Any, Type, TypeVar, Union, get_args, get_origin

from pydantic import BaseModel, ConfigDict, ValidationError, ValidationInfo, field_validator
from pydantic_core import to_jsonable_python

from network_sdk.tier0_core.config import SERVICE_DATE_FORMAT
from network_sdk.tier0_core.errors import ConfigurationError

T = TypeVar("T", bound=BaseModel)


class DecodeError(Exception):
    """Payload bytes could not be decoded into the requested model."""

    def __init__(self, model: type, cause: Exception) -> None:
        self.model = model
        super().__init__(f"could not decode {model.__name__}: {cause}")
        self.__cause__ = cause


# ── Dates ────────────────────────────────────────────────────────────────────

def format_service_date(value: datetime, date_format: str = SERVICE_DATE_FORMAT) -> str:
    """Format *value* with millisecond precision; naive datetimes are taken as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    fmt = date_format.replace("%f", f"{value.microsecond // 1000:03d}")
    return value.strftime(fmt)


def parse_service_date(value: str, date_format: str = SERVICE_DATE_FORMAT) -> datetime:
    return datetime.strptime(value, date_format)


def _accepts_datetime(annotation: Any) -> bool:
    if annotation is datetime:
        return True
    if get_origin(annotation) in (Union, types.UnionType):
        return any(arg is datetime for arg in get_args(annotation))
    return False


# ── Models ───────────────────────────────────────────────────────────────────

class ServiceModel(BaseModel):
    """Base for payload models exchanged with the service."""

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("*", mode="before")
    @classmethod
    def parse_service_dates(cls, v: Any, info: ValidationInfo) -> Any:
        if not isinstance(v, str) or info.field_name is None:
            return v
        field = cls.model_fields.get(info.field_name)
        if field is None or not _accepts_datetime(field.annotation):
            return v
        date_format = (info.context or {}).get("date_format", SERVICE_DATE_FORMAT)
        return parse_service_date(v, date_format)


class EmptyResponse(ServiceModel):
    """Response model for calls whose body carries nothing of interest."""


def default_instance(model: Type[T]) -> T:
    """Build *model* with no arguments, as used for empty success bodies."""
    try:
        return model()
    except (ValidationError, TypeError) as exc:
        raise ConfigurationError(
            f"{model.__name__} cannot be constructed without arguments; "
            "give every field a default or use a different response model"
        ) from exc


# ── Codec ────────────────────────────────────────────────────────────────────

class JsonCodec:
    """
    Usage:
        codec = JsonCodec()
        raw = codec.encode(CreateUser(name="a"))   # → b'{"name":"a"}'
        user = codec.decode(raw, User)
    """

    def __init__(self, date_format: str = SERVICE_DATE_FORMAT) -> None:
        self.date_format = date_format

    def _default(self, obj: Any) -> Any:
        if isinstance(obj, datetime):
            return format_service_date(obj, self.date_format)
        return to_jsonable_python(obj)

    def encode(self, body: BaseModel | dict | list | None) -> bytes:
        if body is None:
            return b""
        if isinstance(body, BaseModel):
            body = body.model_dump(by_alias=True)
        return json.dumps(body, default=self._default, separators=(",", ":")).encode()

    def form_fields(self, body: BaseModel | dict | None) -> dict[str, str]:
        """Flatten a body into multipart form fields; nested values stay JSON."""
        if body is None:
            return {}
        fields = json.loads(self.encode(body))
        if not isinstance(fields, dict):
            raise TypeError(f"multipart body must be an object, got {type(fields).__name__}")
        return {
            k: v if isinstance(v, str) else json.dumps(v, separators=(",", ":"))
            for k, v in fields.items()
            if v is not None
        }

    def decode(self, data: bytes | str, model: Type[T]) -> T:
        try:
            return model.model_validate_json(data, context={"date_format": self.date_format})
        except ValidationError as exc:
            raise DecodeError(model, exc) from exc


_codec = JsonCodec()


def serialize(obj: BaseModel | dict | list) -> bytes:
    """Serialize with the default codec."""
    return _codec.encode(obj)


def deserialize(data: bytes | str, model: Type[T]) -> T:
    """Deserialize with the default codec."""
    return _codec.decode(data, model)


__all__ = [
    "DecodeError",
    "ServiceModel",
    "EmptyResponse",
    "JsonCodec",
    "default_instance",
    "format_service_date",
    "parse_service_date",
    "serialize",
    "deserialize",
]
