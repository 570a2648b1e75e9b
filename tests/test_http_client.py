import base64

import httpx
import pytest

from startrack.core.exceptions import CarrierError, DecodeError, TransportError
from startrack.core.http_client import (
    CarrierGateway,
    CarrierResponse,
    decode_response,
    raise_for_errors,
)


def make_gateway(handler, **kwargs) -> CarrierGateway:
    return CarrierGateway(
        "key",
        "secret",
        "ACC1",
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


class TestDecodeResponse:
    def test_json_body(self):
        assert decode_response(b'{"a": 1}') == {"a": 1}

    def test_opaque_body_is_returned_raw(self):
        pdf = b"%PDF-1.4\n\xff\xfe binary"
        assert decode_response(pdf) == pdf

    def test_empty_body(self):
        assert decode_response(b"") is None


class TestRaiseForErrors:
    def test_top_level_errors_use_first_message(self):
        data = {"errors": [{"code": "E1", "message": "First problem"}, {"message": "Second"}]}
        with pytest.raises(CarrierError) as exc_info:
            raise_for_errors(data)
        assert exc_info.value.message == "First problem"
        assert exc_info.value.code == "E1"
        assert len(exc_info.value.errors) == 2

    def test_nested_shipment_errors(self):
        data = {"shipments": [{"items": []}, {"errors": [{"message": "Bad postcode"}]}]}
        with pytest.raises(CarrierError, match="Bad postcode"):
            raise_for_errors(data)

    def test_empty_errors_array_is_not_a_failure(self):
        raise_for_errors({"errors": []})

    def test_non_mapping_bodies_are_ignored(self):
        raise_for_errors(b"%PDF")
        raise_for_errors(None)


class TestCarrierResponse:
    def test_json_object_rejects_opaque_body(self):
        response = CarrierResponse(status_code=200, content=b"%PDF", data=b"%PDF")
        with pytest.raises(DecodeError):
            response.json_object()


class TestCarrierGateway:
    @pytest.mark.asyncio
    async def test_production_base_path_and_headers(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"ok": True})

        gateway = make_gateway(handler)
        response = await gateway.post("shipments", {"shipments": {}})
        await gateway.close()

        request = seen[0]
        assert str(request.url) == "https://digitalapi.auspost.com.au/shipping/v1/shipments"
        expected = base64.b64encode(b"key:secret").decode()
        assert request.headers["Authorization"] == f"Basic {expected}"
        assert request.headers["Account-Number"] == "ACC1"
        assert request.headers["Content-Type"] == "application/json"
        assert response.data == {"ok": True}

    @pytest.mark.asyncio
    async def test_test_mode_switches_base_path(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={})

        async with make_gateway(handler, test_mode=True) as gateway:
            await gateway.get("accounts/ACC1", include_account=False)

        assert seen[0].url.path == "/test/shipping/v1/accounts/ACC1"
        assert "Account-Number" not in seen[0].headers
        assert "Content-Type" not in seen[0].headers

    @pytest.mark.asyncio
    async def test_each_call_returns_its_own_result(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"path": request.url.path})

        async with make_gateway(handler) as gateway:
            first = await gateway.get("one")
            second = await gateway.get("two")

        assert first.data["path"].endswith("/one")
        assert second.data["path"].endswith("/two")

    @pytest.mark.asyncio
    async def test_carrier_errors_raise_with_message_verbatim(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, json={"errors": [{"code": "44003", "message": "The postcode is invalid."}]})

        async with make_gateway(handler) as gateway:
            with pytest.raises(CarrierError) as exc_info:
                await gateway.post("prices/shipments", {})

        assert exc_info.value.message == "The postcode is invalid."
        assert exc_info.value.status_code == 400

    @pytest.mark.asyncio
    async def test_errors_in_success_response_still_raise(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"errors": [{"message": "Soft failure"}]})

        async with make_gateway(handler) as gateway:
            with pytest.raises(CarrierError, match="Soft failure"):
                await gateway.get("anything")

    @pytest.mark.asyncio
    async def test_http_error_without_errors_array(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(502, content=b"Bad Gateway")

        async with make_gateway(handler) as gateway:
            with pytest.raises(CarrierError) as exc_info:
                await gateway.get("anything")

        assert exc_info.value.status_code == 502
        assert exc_info.value.code == "502"

    @pytest.mark.asyncio
    async def test_timeout_becomes_transport_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        async with make_gateway(handler) as gateway:
            with pytest.raises(TransportError) as exc_info:
                await gateway.get("anything")

        assert isinstance(exc_info.value.__cause__, httpx.ReadTimeout)
        assert exc_info.value.code == "NETWORK_ERROR"

    def test_default_timeout_is_bounded(self):
        gateway = CarrierGateway("k", "p", "a")
        assert gateway.timeout == 15.0
