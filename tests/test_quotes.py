"""
Tests for quote request building and quote filtering.
"""
import copy

import httpx
import pytest

from startrack import Address, CarrierError, Parcel, ShipmentValidationError
from startrack.services.quotes import build_quote_item, filter_quotes, max_dimension


def quote_response(prices: dict) -> dict:
    return {
        "shipments": [
            {"items": [{"product_id": product}], "shipment_summary": {"total_cost": cost}}
            for product, cost in prices.items()
        ]
    }


PRICES = {"FPP": 10, "STD": 5, "PRM": 8}


class TestTransitCover:
    def test_declared_value_adds_transit_cover(self):
        item = build_quote_item(Parcel(length=1, height=1, width=1, weight=1, value=150.5)).to_wire()
        assert item["features"] == {"TRANSIT_COVER": {"attributes": {"cover_amount": 150.5}}}
        assert item["packaging_type"] == "ITM"

    @pytest.mark.parametrize("value", [None, 0, 0.0])
    def test_no_feature_without_positive_value(self, value):
        item = build_quote_item(Parcel(length=1, height=1, width=1, weight=1, value=value)).to_wire()
        assert "features" not in item


class TestMaxDimension:
    def test_largest_dimension_across_parcels(self):
        parcels = [Parcel(length=10, height=20, width=5), Parcel(length=30, height=1, width=1)]
        assert max_dimension(parcels) == 30

    def test_fractional_dimension_is_floored(self):
        assert max_dimension([Parcel(length=12.9, height=3, width=4)]) == 12
        assert isinstance(max_dimension([Parcel(length=12.9, height=3, width=4)]), int)

    def test_no_parcels(self):
        assert max_dimension([]) == 0


class TestFilterQuotes:
    def test_urgent_keeps_only_urgent_products_sorted(self):
        quotes = filter_quotes(quote_response(PRICES), urgent=True)
        assert list(quotes.items()) == [("PRM", 8), ("FPP", 10)]

    def test_non_urgent_keeps_all_sorted(self):
        quotes = filter_quotes(quote_response(PRICES), urgent=False)
        assert list(quotes.items()) == [("STD", 5), ("PRM", 8), ("FPP", 10)]

    def test_equal_costs_keep_response_order(self):
        quotes = filter_quotes(quote_response({"B": 7, "A": 7, "C": 1}))
        assert list(quotes) == ["C", "B", "A"]

    def test_string_costs_are_numeric(self):
        quotes = filter_quotes(quote_response({"FPP": "12.50"}))
        assert quotes == {"FPP": 12.5}

    def test_shipment_error_raises(self):
        data = {"shipments": [{"items": [{"product_id": "FPP"}], "errors": [{"message": "Weight too high"}]}]}
        with pytest.raises(CarrierError, match="Weight too high"):
            filter_quotes(data)


class TestShipmentGetQuotes:
    @pytest.mark.asyncio
    async def test_request_body_and_result(self, make_client, sender, receiver, parcels):
        client, handler = make_client({
            ("POST", "/prices/shipments"): httpx.Response(200, json=quote_response(PRICES)),
        })
        shipment = client.new_shipment().set_from(sender).set_to(receiver)
        for parcel in parcels:
            shipment.add_parcel(parcel)

        quotes = await shipment.get_quotes(urgent=True)
        await client.close()

        assert list(quotes) == ["PRM", "FPP"]
        body = handler.body()
        request_shipment = body["shipments"][0]
        assert request_shipment["from"] == {"suburb": "MELBOURNE", "postcode": "3000", "state": "VIC"}
        assert request_shipment["to"] == {"suburb": "SYDNEY", "postcode": "2000", "state": "NSW"}
        assert [item["packaging_type"] for item in request_shipment["items"]] == ["ITM", "ITM"]
        assert request_shipment["items"][0]["features"]["TRANSIT_COVER"]["attributes"]["cover_amount"] == 100.0
        assert "features" not in request_shipment["items"][1]

    @pytest.mark.asyncio
    async def test_quoting_does_not_mutate_parcels(self, make_client, sender, receiver, parcels):
        client, _ = make_client({
            ("POST", "/prices/shipments"): httpx.Response(200, json=quote_response(PRICES)),
        })
        shipment = client.new_shipment().set_from(sender).set_to(receiver)
        for parcel in parcels:
            shipment.add_parcel(parcel)
        before = copy.deepcopy(shipment.parcels)

        first = await shipment.get_quotes()
        second = await shipment.get_quotes()
        await client.close()

        assert first == second
        assert shipment.parcels == before
        assert shipment.shipment_id is None

    @pytest.mark.asyncio
    async def test_top_level_error_raises_first_message(self, make_client, sender, receiver, parcels):
        client, _ = make_client({
            ("POST", "/prices/shipments"): httpx.Response(
                200, json={"errors": [{"message": "Invalid suburb"}, {"message": "Other"}]}
            ),
        })
        shipment = client.new_shipment().set_from(sender).set_to(receiver).add_parcel(parcels[0])

        with pytest.raises(CarrierError, match="Invalid suburb"):
            await shipment.get_quotes()
        await client.close()

    @pytest.mark.asyncio
    async def test_missing_address_is_rejected_before_sending(self, make_client, sender, parcels):
        client, handler = make_client({})
        shipment = client.new_shipment().set_from(sender).add_parcel(parcels[0])

        with pytest.raises(ShipmentValidationError):
            await shipment.get_quotes()
        assert handler.requests == []

    @pytest.mark.asyncio
    async def test_parcel_without_weight_is_rejected(self, make_client, sender, receiver):
        client, handler = make_client({})
        shipment = client.new_shipment().set_from(sender).set_to(receiver)
        shipment.add_parcel(Parcel(length=10, height=10, width=10, weight=0))

        with pytest.raises(ShipmentValidationError) as exc_info:
            await shipment.get_quotes()
        assert exc_info.value.details["parcel_index"] == 0
        assert handler.requests == []

    @pytest.mark.asyncio
    async def test_invalid_address_field_is_a_validation_error(self, make_client, receiver, parcels):
        client, handler = make_client({})
        sender = Address(suburb=None, state="VIC", postcode="3000")
        shipment = client.new_shipment().set_from(sender).set_to(receiver).add_parcel(parcels[0])

        with pytest.raises(ShipmentValidationError):
            await shipment.get_quotes()
        assert handler.requests == []

    @pytest.mark.asyncio
    async def test_no_parcels_is_rejected(self, make_client, sender, receiver):
        client, _ = make_client({})
        shipment = client.new_shipment().set_from(sender).set_to(receiver)

        with pytest.raises(ShipmentValidationError):
            await shipment.get_quotes()
