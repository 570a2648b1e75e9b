"""
Shipment Lodgement

Builds the POST shipments body and reconciles the carrier's answer back
onto the Shipment and its parcels.

Reconciliation modes:
- LEGACY: every returned item is written onto every parcel, so all parcels
  end up with the ids of the last item processed. Shipment id and lodged
  time come from the last returned block. Kept for compatibility; it is
  wrong for multi-parcel shipments.
- POSITIONAL: returned items are matched to parcels by position.
- REFERENCE: returned items are matched to parcels by item_reference.
"""
import logging
from enum import Enum
from typing import List, TYPE_CHECKING

from pydantic import ValidationError

from startrack.core.exceptions import ReconciliationError, ShipmentStateError, ShipmentValidationError
from startrack.core.utils import parse_timestamp
from startrack.models.address import Address
from startrack.models.parcel import Parcel
from startrack.schemas.shipping import (
    AddressBlock,
    ItemFeatures,
    LodgedItem,
    ShipmentItem,
    ShipmentRequest,
    ShipmentsRequest,
    ShipmentsResponse,
    ToAddressBlock,
)
from startrack.services.quotes import validate_for_quote

if TYPE_CHECKING:
    from startrack.models.shipment import Shipment

logger = logging.getLogger(__name__)


class ReconciliationMode(str, Enum):
    LEGACY = "legacy"
    POSITIONAL = "positional"
    REFERENCE = "reference"


def _address_fields(address: Address) -> dict:
    return {
        "name": address.name,
        "business_name": address.business_name,
        "lines": list(address.lines),
        "suburb": address.suburb,
        "state": address.state,
        "postcode": address.postcode,
        "country": address.country,
        "phone": address.phone,
        "email": address.email,
    }


def build_shipment_item(parcel: Parcel, product_id: str) -> ShipmentItem:
    return ShipmentItem(
        item_reference=parcel.item_reference,
        product_id=product_id,
        length=parcel.length,
        height=parcel.height,
        width=parcel.width,
        weight=parcel.weight,
        contains_dangerous_goods=parcel.contains_dangerous_goods,
        authority_to_leave=parcel.authority_to_leave,
        safe_drop_enabled=parcel.safe_drop_enabled,
        allow_partial_delivery=parcel.allow_partial_delivery,
        packaging_type=parcel.packaging_type,
        features=ItemFeatures.for_value(parcel.value),
    )


def build_shipment_request(shipment: "Shipment") -> ShipmentsRequest:
    """
    Build the POST shipments body.

    The shipment-level product_id is copied onto every parcel, replacing
    any parcel-level value.
    """
    if shipment.shipment_id:
        raise ShipmentStateError("Shipment has already been lodged", shipment_id=shipment.shipment_id)
    validate_for_quote(shipment)

    # Domestic and international lodgements currently share one request shape
    logger.debug(f"Building {'domestic' if shipment.to_address.is_domestic else 'international'} shipment request")

    try:
        request = ShipmentRequest(
            shipment_reference=shipment.shipment_reference,
            customer_reference_1=shipment.customer_reference_1,
            customer_reference_2=shipment.customer_reference_2,
            email_tracking_enabled=shipment.email_tracking_enabled,
            movement_type=shipment.movement_type.value,
            from_=AddressBlock(**_address_fields(shipment.from_address)),
            to=ToAddressBlock(
                **_address_fields(shipment.to_address),
                delivery_instructions=shipment.delivery_instructions,
            ),
            items=[build_shipment_item(parcel, shipment.product_id) for parcel in shipment.parcels],
        )
    except ValidationError as e:
        raise ShipmentValidationError(
            "Shipment cannot be lodged: invalid request fields",
            details={"errors": e.errors(include_url=False)},
        ) from e

    # Parcels only take the shipment product once the request is valid
    for parcel in shipment.parcels:
        parcel.product_id = shipment.product_id
    return ShipmentsRequest(shipments=request)


def _assign(parcel: Parcel, item: LodgedItem) -> None:
    parcel.item_id = item.item_id
    parcel.tracking_article_id = item.tracking_details.article_id
    parcel.tracking_consignment_id = item.tracking_details.consignment_id


def _reconcile_legacy(parcels: List[Parcel], response: ShipmentsResponse) -> None:
    for block in response.shipments:
        for item in block.items:
            for parcel in parcels:
                _assign(parcel, item)


def _reconcile_positional(parcels: List[Parcel], response: ShipmentsResponse) -> None:
    items = [item for block in response.shipments for item in block.items]
    if len(items) != len(parcels):
        raise ReconciliationError(
            f"Carrier returned {len(items)} items for {len(parcels)} parcels",
            details={"returned_items": len(items), "parcels": len(parcels)},
        )
    for parcel, item in zip(parcels, items):
        _assign(parcel, item)


def _reconcile_reference(parcels: List[Parcel], response: ShipmentsResponse) -> None:
    by_reference = {}
    for parcel in parcels:
        if parcel.item_reference is None:
            continue
        if parcel.item_reference in by_reference:
            raise ReconciliationError(
                f"Duplicate item_reference {parcel.item_reference!r} cannot be matched",
                details={"item_reference": parcel.item_reference},
            )
        by_reference[parcel.item_reference] = parcel

    for block in response.shipments:
        for item in block.items:
            parcel = by_reference.get(item.item_reference)
            if parcel is None:
                logger.warning(f"Returned item {item.item_id} has unknown item_reference {item.item_reference!r}")
                continue
            _assign(parcel, item)


def reconcile(
    shipment: "Shipment",
    response: ShipmentsResponse,
    mode: ReconciliationMode = ReconciliationMode.LEGACY,
) -> None:
    """Write carrier-assigned ids from a lodgement response onto the shipment."""
    if not response.shipments:
        raise ReconciliationError("Carrier returned no shipments for lodgement")

    mode = ReconciliationMode(mode)
    if mode is ReconciliationMode.LEGACY:
        if len(shipment.parcels) > 1:
            logger.warning(
                f"Legacy reconciliation assigns the same tracking ids to all {len(shipment.parcels)} parcels"
            )
        _reconcile_legacy(shipment.parcels, response)
        # Last block wins
        block = response.shipments[-1]
    elif mode is ReconciliationMode.POSITIONAL:
        _reconcile_positional(shipment.parcels, response)
        block = response.shipments[0]
    else:
        _reconcile_reference(shipment.parcels, response)
        block = response.shipments[0]

    shipment.shipment_id = block.shipment_id
    shipment.shipment_lodged_at = parse_timestamp(block.shipment_creation_date)
