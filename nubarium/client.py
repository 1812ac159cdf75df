from __future__ import annotations

import base64
import dataclasses
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping

import dateparser
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .config import NubariumSettings
from .date import DateError, DateParser
from .models import ComprobanteDomicilioResponse

logger = logging.getLogger(__name__)

ENDPOINT_COMPROBANTE_DOMICILIO = "/ocr/v2/comprobante_domicilio"

DEFAULT_RETRY_MAX = 3
DEFAULT_TIMEOUT_S = 300
RETRY_STATUSES = (429, 500, 502, 503, 504)


class NubariumRequestError(RuntimeError):
    """Raised when a request cannot be built or sent."""


class NubariumResponseError(RuntimeError):
    """Raised when a response cannot be decoded into the expected shape."""


class NubariumNonJSONResponseError(NubariumResponseError):
    """Raised when the service answers with something other than JSON (error pages, HTML)."""

    def __init__(self, response: "Response") -> None:
        super().__init__(
            f"API returned non-JSON response (status {response.status_code}): {response.json_data}"
        )
        self.response = response


@dataclass(frozen=True)
class Response:
    json_data: str
    status_code: int
    headers: Mapping[str, str] = field(default_factory=dict)

    def parse_response(self) -> Any:
        return json.loads(self.json_data)


def build_session(retry_max: int = DEFAULT_RETRY_MAX, backoff_factor: float = 0.5) -> requests.Session:
    """requests.Session that retries connection errors and 429/5xx with exponential backoff."""
    retry = Retry(
        total=retry_max,
        connect=retry_max,
        read=retry_max,
        status=retry_max,
        backoff_factor=backoff_factor,
        status_forcelist=RETRY_STATUSES,
        allowed_methods=frozenset({"GET", "POST"}),
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry)
    session = requests.Session()
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


def basic_auth_header(username: str, password: str) -> str:
    token = base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")
    return "Basic " + token


def parse_fecha(fecha: str, parser: DateParser) -> tuple[datetime | None, Exception | None]:
    """Parse a response date field; errors are returned, not raised.

    Slash-delimited and empty values go through DateParser. Anything else
    ("12 de junio de 2025") is handed to dateparser, day first.
    """

    if not fecha or "/" in fecha:
        try:
            return parser.parse(fecha), None
        except DateError as e:
            return None, e

    dt = dateparser.parse(fecha, languages=["es", "en"], settings={"DATE_ORDER": "DMY"})
    if dt is None:
        return None, DateError(f"unable to parse date {fecha!r}")
    return dt.astimezone(), None


@dataclass
class NubariumClient:
    """Nubarium OCR API client (JSON over HTTP, Basic auth, automatic retries)."""

    base_url: str = ""
    username: str = ""
    password: str = ""
    timeout_s: float = DEFAULT_TIMEOUT_S
    session: requests.Session = field(default_factory=build_session)
    date_parser: DateParser = field(default_factory=DateParser)

    @classmethod
    def from_env(cls, **kwargs: Any) -> "NubariumClient":
        settings = NubariumSettings.from_env()
        return cls(
            base_url=settings.endpoint,
            username=settings.username,
            password=settings.password,
            **kwargs,
        )

    def send_request(self, endpoint: str, json_request: str) -> Response:
        url = self.base_url + endpoint
        headers = {"Content-Type": "application/json"}
        if self.username and self.password:
            headers["Authorization"] = basic_auth_header(self.username, self.password)

        logger.debug("POST %s (%d bytes)", url, len(json_request))
        try:
            r = self.session.post(
                url,
                data=json_request.encode("utf-8"),
                headers=headers,
                timeout=self.timeout_s,
            )
        except requests.RequestException as e:
            raise NubariumRequestError(f"error sending request: {e}") from e

        resp = Response(json_data=r.text, status_code=r.status_code, headers=dict(r.headers))
        logger.debug("POST %s -> %d", url, resp.status_code)

        try:
            json.loads(resp.json_data)
        except ValueError:
            raise NubariumNonJSONResponseError(resp) from None

        return resp

    def send_request_with_payload(self, endpoint: str, payload: Any) -> Response:
        if dataclasses.is_dataclass(payload) and not isinstance(payload, type):
            payload = dataclasses.asdict(payload)
        try:
            body = json.dumps(payload)
        except (TypeError, ValueError) as e:
            raise NubariumRequestError(f"error marshaling payload to JSON: {e}") from e
        return self.send_request(endpoint, body)

    def send_comprobante_domicilio(self, document_source: str) -> ComprobanteDomicilioResponse:
        """Send a proof-of-address document (URL or base64 string) and decode the result.

        The ``fecha`` field is parsed into ``parsed_date``; when that fails the
        error is kept in ``date_error`` and the response is still returned.
        """

        response = self.send_request_with_payload(
            ENDPOINT_COMPROBANTE_DOMICILIO,
            {"comprobante": document_source},
        )

        try:
            result = ComprobanteDomicilioResponse.from_dict(response.parse_response())
        except (TypeError, ValueError) as e:
            raise NubariumResponseError(f"error parsing response: {e}") from e

        result.parsed_date, result.date_error = parse_fecha(result.fecha, self.date_parser)
        if result.date_error is not None:
            logger.warning("could not parse fecha %r: %s", result.fecha, result.date_error)

        return result
