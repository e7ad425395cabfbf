"""Tests for tier1_runtime modules."""
from __future__ import annotations

import dataclasses
import json
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import pytest
from pydantic import BaseModel

from network_sdk.tier0_core.config import _reset_config
from network_sdk.tier0_core.errors import ConfigurationError
from network_sdk.tier0_core.http import HTTPMethod
from network_sdk.tier1_runtime.request import RequestDescriptor
from network_sdk.tier1_runtime.serialize import (
    DecodeError,
    EmptyResponse,
    JsonCodec,
    ServiceModel,
    default_instance,
    format_service_date,
    parse_service_date,
)


# ── request ────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class GetUserRequest(RequestDescriptor):
    host: str = "https://api.x"
    route: str = "/users/me"
    method: HTTPMethod = HTTPMethod.GET
    alert_on_error: bool = False


class TestRequestDescriptor:
    def test_defaults(self):
        req = RequestDescriptor()
        assert req.method is HTTPMethod.POST
        assert req.timeout == 25.0
        assert req.multipart_timeout == 30.0
        assert req.alert_on_error is True
        assert req.is_multipart is False
        assert dict(req.headers) == {
            "Content-Type": "application/json",
            "accept": "application/json",
        }

    def test_url_is_host_plus_route(self):
        req = RequestDescriptor(host="https://api.x", route="/users")
        assert req.url == "https://api.x/users"

    def test_subclass_overrides_defaults(self):
        req = GetUserRequest()
        assert req.url == "https://api.x/users/me"
        assert req.method is HTTPMethod.GET
        assert req.alert_on_error is False

    def test_method_accepts_plain_string(self):
        assert RequestDescriptor(method="PUT").method is HTTPMethod.PUT

    def test_effective_timeout(self):
        assert RequestDescriptor().effective_timeout == 25.0
        assert RequestDescriptor(is_multipart=True).effective_timeout == 30.0

    def test_timeouts_default_from_config(self, monkeypatch):
        monkeypatch.setenv("NETWORK_TIMEOUT", "5")
        monkeypatch.setenv("NETWORK_MULTIPART_TIMEOUT", "9")
        _reset_config()
        req = RequestDescriptor()
        assert req.timeout == 5.0
        assert req.multipart_timeout == 9.0
        assert req.replace(is_multipart=True).effective_timeout == 9.0

    def test_explicit_timeout_beats_config(self, monkeypatch):
        monkeypatch.setenv("NETWORK_TIMEOUT", "5")
        _reset_config()
        assert RequestDescriptor(timeout=12.0).timeout == 12.0

    def test_immutable(self):
        req = RequestDescriptor()
        with pytest.raises(dataclasses.FrozenInstanceError):
            req.route = "/other"  # type: ignore[misc]
        with pytest.raises(TypeError):
            req.headers["X-Extra"] = "1"  # type: ignore[index]

    def test_with_headers_keeps_order_and_original(self):
        req = RequestDescriptor()
        extended = req.with_headers({"Authorization": "Bearer t"})
        assert list(extended.headers) == ["Content-Type", "accept", "Authorization"]
        assert "Authorization" not in req.headers


# ── serialize ──────────────────────────────────────────────────────────────

class Event(ServiceModel):
    name: str
    starts_at: datetime
    ends_at: datetime | None = None


class Required(BaseModel):
    id: str


class TestDates:
    def test_format_has_millisecond_precision(self):
        dt = datetime(2021, 2, 16, 10, 30, 5, 123456, tzinfo=timezone.utc)
        assert format_service_date(dt) == "2021-02-16T10:30:05.123+0000"

    def test_naive_datetime_formatted_as_utc(self):
        assert format_service_date(datetime(2021, 2, 16)).endswith("+0000")

    def test_parse_offset(self):
        dt = parse_service_date("2021-02-16T10:30:05.123+0300")
        assert dt.utcoffset() == timedelta(hours=3)
        assert dt.microsecond == 123000


class TestCodec:
    def test_encode_dict_is_compact(self):
        assert JsonCodec().encode({"name": "a"}) == b'{"name":"a"}'

    def test_encode_none_is_empty(self):
        assert JsonCodec().encode(None) == b""

    def test_encode_model_uses_service_date_format(self):
        event = Event(name="launch", starts_at=datetime(2021, 2, 16, 9, 0, tzinfo=timezone.utc))
        data = json.loads(JsonCodec().encode(event))
        assert data["starts_at"] == "2021-02-16T09:00:00.000+0000"

    def test_decode_service_dates(self):
        event = JsonCodec().decode(
            b'{"name": "launch", "starts_at": "2021-02-16T09:00:00.250+0000", "ends_at": null}',
            Event,
        )
        assert event.starts_at == datetime(2021, 2, 16, 9, 0, 0, 250000, tzinfo=timezone.utc)
        assert event.ends_at is None

    def test_decode_optional_date(self):
        event = JsonCodec().decode(
            b'{"name": "x", "starts_at": "2021-02-16T09:00:00.000+0000", '
            b'"ends_at": "2021-02-16T10:00:00.000+0000"}',
            Event,
        )
        assert event.ends_at is not None
        assert event.ends_at.hour == 10

    def test_decode_rejects_other_date_formats(self):
        with pytest.raises(DecodeError):
            JsonCodec().decode(b'{"name": "x", "starts_at": "16/02/2021"}', Event)

    def test_custom_date_format(self):
        codec = JsonCodec(date_format="%Y-%m-%d %H:%M%z")
        event = codec.decode(b'{"name": "x", "starts_at": "2021-02-16 09:00+0000"}', Event)
        assert event.starts_at.minute == 0

    def test_malformed_json_raises_decode_error(self):
        with pytest.raises(DecodeError) as info:
            JsonCodec().decode(b"{not json", Event)
        assert info.value.model is Event

    def test_form_fields(self):
        fields = JsonCodec().form_fields({"name": "a", "tags": ["x", "y"], "age": 3, "skip": None})
        assert fields == {"name": "a", "tags": '["x","y"]', "age": "3"}


class TestDefaultInstance:
    def test_empty_response(self):
        assert isinstance(default_instance(EmptyResponse), EmptyResponse)

    def test_required_fields_are_a_configuration_error(self):
        with pytest.raises(ConfigurationError, match="Required"):
            default_instance(Required)
