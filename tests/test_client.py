from __future__ import annotations

import base64
import json
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

import pytest
import requests

from nubarium.client import (
    ENDPOINT_COMPROBANTE_DOMICILIO,
    NubariumClient,
    NubariumNonJSONResponseError,
    NubariumRequestError,
    NubariumResponseError,
    build_session,
)
from nubarium.date import DateOutOfRangeError, EmptyDateError

FIXTURES = Path(__file__).parent / "testdata" / "responses"


@dataclass
class FakeHTTPResponse:
    status_code: int
    text: str
    headers: dict[str, str] = field(default_factory=lambda: {"Content-Type": "application/json"})


@dataclass
class FakeSession:
    responses: list[Any]
    calls: list[dict[str, Any]] = field(default_factory=list)

    def post(self, url: str, *, data: bytes, headers: dict[str, str], timeout: float) -> FakeHTTPResponse:
        self.calls.append({"url": url, "data": data, "headers": headers, "timeout": timeout})
        r = self.responses.pop(0)
        if isinstance(r, Exception):
            raise r
        return r


def _client(*responses: Any, **kwargs: Any) -> tuple[NubariumClient, FakeSession]:
    session = FakeSession(responses=list(responses))
    client = NubariumClient(base_url="https://api.example.test", session=session, **kwargs)  # type: ignore[arg-type]
    return client, session


def test_send_request_sets_json_and_basic_auth() -> None:
    client, session = _client(FakeHTTPResponse(200, '{"ok": true}'), username="user", password="pass")
    resp = client.send_request("/x", '{"a": 1}')

    assert resp.status_code == 200
    assert resp.parse_response() == {"ok": True}
    call = session.calls[0]
    assert call["url"] == "https://api.example.test/x"
    assert call["data"] == b'{"a": 1}'
    assert call["headers"]["Content-Type"] == "application/json"
    assert call["headers"]["Authorization"] == "Basic " + base64.b64encode(b"user:pass").decode("ascii")
    assert call["timeout"] == 300


def test_send_request_without_full_credentials_skips_auth() -> None:
    client, session = _client(FakeHTTPResponse(200, "{}"), username="user")
    client.send_request("/x", "{}")
    assert "Authorization" not in session.calls[0]["headers"]


def test_non_json_response_raises_with_response_attached() -> None:
    client, _ = _client(FakeHTTPResponse(502, "<html>Bad Gateway</html>", {"Content-Type": "text/html"}))
    with pytest.raises(NubariumNonJSONResponseError) as exc:
        client.send_request("/x", "{}")
    assert exc.value.response.status_code == 502
    assert exc.value.response.json_data == "<html>Bad Gateway</html>"
    assert "status 502" in str(exc.value)


def test_transport_error_is_wrapped() -> None:
    client, _ = _client(requests.ConnectionError("refused"))
    with pytest.raises(NubariumRequestError, match="error sending request"):
        client.send_request("/x", "{}")


def test_unserializable_payload() -> None:
    client, session = _client()
    with pytest.raises(NubariumRequestError, match="marshaling"):
        client.send_request_with_payload("/x", {"when": object()})
    assert session.calls == []


def test_send_comprobante_domicilio_parses_fixture_and_date() -> None:
    body = (FIXTURES / "cfe_string_total.json").read_text(encoding="utf-8")
    client, session = _client(FakeHTTPResponse(200, body))

    result = client.send_comprobante_domicilio("https://example.test/recibo.jpg")

    call = session.calls[0]
    assert call["url"] == "https://api.example.test" + ENDPOINT_COMPROBANTE_DOMICILIO
    assert json.loads(call["data"]) == {"comprobante": "https://example.test/recibo.jpg"}
    assert result.nombre == "ANON USER"
    assert result.parsed_date == datetime(2025, 4, 13).astimezone()
    assert result.date_error is None


def test_noisy_fecha_goes_through_date_parser() -> None:
    body = (FIXTURES / "telmex_object_total.json").read_text(encoding="utf-8")
    client, _ = _client(FakeHTTPResponse(200, body))
    result = client.send_comprobante_domicilio("aGVsbG8=")
    assert result.parsed_date == datetime(2020, 1, 24).astimezone()


def test_date_error_is_recorded_not_raised() -> None:
    client, _ = _client(FakeHTTPResponse(200, json.dumps({"status": "OK", "fecha": "//"})))
    result = client.send_comprobante_domicilio("x")
    assert result.parsed_date is None
    assert isinstance(result.date_error, EmptyDateError)
    assert result.to_dict()["dateError"] == "date is empty"


def test_written_out_fecha_uses_dateparser() -> None:
    client, _ = _client(FakeHTTPResponse(200, json.dumps({"fecha": "12 de junio de 2025"})))
    result = client.send_comprobante_domicilio("x")
    assert result.date_error is None
    assert result.parsed_date is not None
    assert result.parsed_date.tzinfo is not None
    assert (result.parsed_date.year, result.parsed_date.month, result.parsed_date.day) == (2025, 6, 12)


def test_schema_mismatch_raises() -> None:
    client, _ = _client(FakeHTTPResponse(200, json.dumps({"nombre": 123})))
    with pytest.raises(NubariumResponseError, match="error parsing response"):
        client.send_comprobante_domicilio("x")


def test_build_session_mounts_retrying_adapter() -> None:
    session = build_session(retry_max=3)
    adapter = session.get_adapter("https://api.example.test")
    retry = adapter.max_retries
    assert retry.total == 3
    assert 503 in retry.status_forcelist
    assert "POST" in retry.allowed_methods


def test_from_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("NUBARIUM_ENDPOINT", "https://api.example.test")
    monkeypatch.setenv("NUBARIUM_USERNAME", "u")
    monkeypatch.setenv("NUBARIUM_PASSWORD", "p")
    client = NubariumClient.from_env()
    assert (client.base_url, client.username, client.password) == ("https://api.example.test", "u", "p")


def test_overlong_fecha_is_recorded_not_raised() -> None:
    fecha = "1" * 5000 + "/01/2020"
    client, _ = _client(FakeHTTPResponse(200, json.dumps({"fecha": fecha})))
    result = client.send_comprobante_domicilio("x")
    assert result.parsed_date is None
    assert isinstance(result.date_error, DateOutOfRangeError)


def test_parsed_dates_are_comparable_across_paths() -> None:
    client, _ = _client(
        FakeHTTPResponse(200, json.dumps({"fecha": "13/04/2025"})),
        FakeHTTPResponse(200, json.dumps({"fecha": "12 de junio de 2025"})),
    )
    first = client.send_comprobante_domicilio("x").parsed_date
    second = client.send_comprobante_domicilio("y").parsed_date
    assert first is not None and second is not None
    assert first < second
