"""
Carrier Gateway for the StarTrack / Australia Post shipping API

Request/response plumbing shared by every endpoint:
- HTTP Basic auth plus optional Account-Number header
- Test mode base path switching (/shipping/v1/ vs /test/shipping/v1/)
- Bounded timeout (15s default)
- Body decoding: JSON when parseable, otherwise opaque bytes (inline PDFs)
- Carrier `errors` arrays surface as CarrierError before returning

Each call returns its own CarrierResponse. The gateway keeps no in-flight
response state between calls.
"""
import base64
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

import httpx

from startrack.core.config import DEFAULT_API_HOST, DEFAULT_TIMEOUT_SECONDS
from startrack.core.exceptions import CarrierError, DecodeError, TransportError

logger = logging.getLogger(__name__)

PRODUCTION_BASE_PATH = "/shipping/v1/"
TEST_BASE_PATH = "/test/shipping/v1/"

Decoded = Union[Dict[str, Any], list, bytes, None]


def decode_response(content: bytes) -> Decoded:
    """
    Decode a response body.

    Returns the parsed JSON value, the raw bytes when the body is not JSON
    (could be an inline pdf), or None for an empty body.
    """
    if not content:
        return None
    try:
        return json.loads(content)
    except (ValueError, UnicodeDecodeError):
        return content


def raise_for_errors(data: Decoded, status_code: Optional[int] = None) -> None:
    """Raise CarrierError if a decoded body carries a top-level or per-shipment `errors` array."""
    if not isinstance(data, dict):
        return

    errors = data.get("errors")
    if isinstance(errors, list) and errors:
        raise CarrierError.from_errors(errors, status_code=status_code)

    shipments = data.get("shipments")
    if isinstance(shipments, list):
        for shipment in shipments:
            if not isinstance(shipment, dict):
                continue
            shipment_errors = shipment.get("errors")
            if isinstance(shipment_errors, list) and shipment_errors:
                raise CarrierError.from_errors(shipment_errors, status_code=status_code)


@dataclass
class CarrierResponse:
    """Result of a single gateway call."""
    status_code: int
    headers: Dict[str, str] = field(default_factory=dict)
    content: bytes = b""
    data: Decoded = None

    @property
    def is_structured(self) -> bool:
        return isinstance(self.data, (dict, list))

    def json_object(self) -> Dict[str, Any]:
        """Return the decoded body as a JSON object or raise DecodeError."""
        if not isinstance(self.data, dict):
            raise DecodeError(
                "Expected a JSON object from the carrier",
                details={
                    "status_code": self.status_code,
                    "content_type": self.headers.get("content-type"),
                    "length": len(self.content),
                },
            )
        return self.data


class CarrierGateway:
    """
    Async gateway to the StarTrack shipping API.

    Usage:
        async with CarrierGateway(key, password, account) as gateway:
            response = await gateway.send("GET", f"accounts/{account}", include_account=False)
    """

    def __init__(
        self,
        api_key: str,
        api_password: str,
        account_number: str,
        test_mode: bool = False,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        host: str = DEFAULT_API_HOST,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.api_password = api_password
        self.account_number = account_number
        self.test_mode = test_mode
        self.timeout = timeout
        self.host = host.rstrip("/")
        self._transport = transport
        self._http_client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        self._get_http_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    @property
    def base_path(self) -> str:
        return TEST_BASE_PATH if self.test_mode else PRODUCTION_BASE_PATH

    @property
    def base_url(self) -> str:
        return f"{self.host}{self.base_path}"

    def _get_http_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._http_client

    async def close(self):
        """Close HTTP client."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    def build_headers(self, has_body: bool = False, include_account: bool = True) -> Dict[str, str]:
        """Build the request headers for one call."""
        credentials = f"{self.api_key}:{self.api_password}"
        headers = {
            "Authorization": f"Basic {base64.b64encode(credentials.encode()).decode()}",
            "Accept": "*/*",
            "Cache-Control": "no-cache",
        }
        if has_body:
            headers["Content-Type"] = "application/json"
        if include_account and self.account_number:
            headers["Account-Number"] = self.account_number
        return headers

    async def send(
        self,
        method: str,
        path: str,
        body: Optional[Dict[str, Any]] = None,
        include_account: bool = True,
    ) -> CarrierResponse:
        """
        Send one request and return its decoded result.

        Raises:
            TransportError: connection or timeout failure
            CarrierError: the carrier reported errors or an HTTP error status
        """
        client = self._get_http_client()
        path = path.lstrip("/")
        content = json.dumps(body).encode() if body is not None else None
        headers = self.build_headers(has_body=content is not None, include_account=include_account)

        try:
            response = await client.request(method.upper(), path, content=content, headers=headers)
        except httpx.RequestError as e:
            logger.error(f"StarTrack API {method.upper()} {path} failed: {e!r}")
            raise TransportError(
                f"Network error: {e}",
                details={"method": method.upper(), "path": path},
            ) from e

        logger.debug(f"StarTrack API {method.upper()} {path} -> {response.status_code}")

        result = CarrierResponse(
            status_code=response.status_code,
            headers=dict(response.headers),
            content=response.content,
            data=decode_response(response.content),
        )

        try:
            raise_for_errors(result.data, status_code=result.status_code)
        except CarrierError as e:
            logger.error(f"StarTrack API error on {method.upper()} {path}: {e.code} - {e.message}")
            raise

        if response.status_code >= 400:
            logger.error(f"StarTrack API {method.upper()} {path} returned HTTP {response.status_code}")
            raise CarrierError(
                f"StarTrack API returned HTTP {response.status_code}",
                status_code=response.status_code,
                code=str(response.status_code),
            )

        return result

    async def get(self, path: str, include_account: bool = True) -> CarrierResponse:
        return await self.send("GET", path, include_account=include_account)

    async def post(self, path: str, body: Dict[str, Any]) -> CarrierResponse:
        return await self.send("POST", path, body)

    async def put(self, path: str, body: Dict[str, Any]) -> CarrierResponse:
        return await self.send("PUT", path, body)

    async def delete(self, path: str) -> CarrierResponse:
        return await self.send("DELETE", path)
