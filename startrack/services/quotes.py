"""
Quote Engine

Builds the prices/shipments request from a Shipment and turns the
carrier's answer into a product_id -> cost mapping ordered by cost.
Quoting never mutates the shipment or its parcels.
"""
import logging
import math
from typing import Any, Dict, Iterable, TYPE_CHECKING

from pydantic import ValidationError

from startrack.core.exceptions import CarrierError, DecodeError, ShipmentValidationError
from startrack.models.address import Address
from startrack.models.parcel import Parcel
from startrack.schemas.shipping import (
    ItemFeatures,
    QuoteItem,
    QuoteLocation,
    QuoteRequest,
    QuoteResponse,
    QuoteShipment,
)

if TYPE_CHECKING:
    from startrack.models.shipment import Shipment

logger = logging.getLogger(__name__)

QUOTE_PACKAGING_TYPE = "ITM"

# Products offered when an urgent quote is requested
URGENT_PRODUCTS = frozenset({"FPP", "PRM"})


def validate_for_quote(shipment: "Shipment") -> None:
    """Raise ShipmentValidationError unless the shipment can be quoted."""
    if shipment.from_address is None or shipment.to_address is None:
        raise ShipmentValidationError("Shipment needs both a from and a to address")
    if not shipment.parcels:
        raise ShipmentValidationError("Shipment needs at least one parcel")
    for index, parcel in enumerate(shipment.parcels):
        if not parcel.has_positive_measurements():
            raise ShipmentValidationError(
                f"Parcel {index} must have positive length, height, width and weight",
                details={"parcel_index": index, "item_reference": parcel.item_reference},
            )


def max_dimension(parcels: Iterable[Parcel]) -> int:
    """Largest length/height/width across all parcels, floored to an integer."""
    largest = 0.0
    for parcel in parcels:
        largest = max(largest, parcel.max_dimension)
    return int(math.floor(largest))


def _location(address: Address) -> QuoteLocation:
    return QuoteLocation(suburb=address.suburb, postcode=address.postcode, state=address.state)


def build_quote_item(parcel: Parcel) -> QuoteItem:
    return QuoteItem(
        packaging_type=QUOTE_PACKAGING_TYPE,
        length=parcel.length,
        height=parcel.height,
        width=parcel.width,
        weight=parcel.weight,
        features=ItemFeatures.for_value(parcel.value),
    )


def build_quote_request(shipment: "Shipment") -> QuoteRequest:
    """Build the prices/shipments body for a shipment."""
    validate_for_quote(shipment)
    try:
        return QuoteRequest(shipments=[
            QuoteShipment(
                from_=_location(shipment.from_address),
                to=_location(shipment.to_address),
                items=[build_quote_item(parcel) for parcel in shipment.parcels],
            )
        ])
    except ValidationError as e:
        raise ShipmentValidationError(
            "Shipment cannot be quoted: invalid request fields",
            details={"errors": e.errors(include_url=False)},
        ) from e


def filter_quotes(data: Dict[str, Any], urgent: bool = False) -> Dict[str, float]:
    """
    Extract quotes from a prices/shipments response.

    Args:
        data: Decoded response body
        urgent: Keep only urgent products (FPP, PRM)

    Returns:
        product_id -> total cost, ascending by cost; equal costs keep response order
    """
    try:
        response = QuoteResponse.model_validate(data)
    except ValidationError as e:
        raise DecodeError("Unexpected quote response from carrier", details={"errors": e.errors()}) from e

    quotes: Dict[str, float] = {}
    for shipment in response.shipments:
        if shipment.errors:
            raise CarrierError.from_errors([err.model_dump() for err in shipment.errors])
        if not shipment.items:
            continue
        product_id = shipment.items[0].product_id
        if urgent and product_id not in URGENT_PRODUCTS:
            continue
        quotes[product_id] = shipment.shipment_summary.total_cost

    # sorted() is stable, so equal costs keep first-seen order
    return dict(sorted(quotes.items(), key=lambda item: item[1]))
