"""
Shipment aggregate

A shipment owns one from address, one to address and an ordered list of
parcels. It is populated with chainable setters, then quoted (repeatable)
or lodged (once). Parcel order must not change between building the
lodgement request and reconciling its response.

Not safe for concurrent use: callers must serialize operations on one
Shipment.
"""
import logging
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, TYPE_CHECKING

from startrack.core.exceptions import ShipmentStateError
from startrack.models.address import Address
from startrack.models.label import LabelType
from startrack.models.parcel import Parcel
from startrack.services.lodgement import ReconciliationMode, build_shipment_request, reconcile
from startrack.services.quotes import build_quote_request, max_dimension

if TYPE_CHECKING:
    from startrack.services.startrack_client import StartrackClient

logger = logging.getLogger(__name__)


class MovementType(str, Enum):
    DESPATCH = "DESPATCH"
    RETURN = "RETURN"
    TRANSFER = "TRANSFER"


class Shipment:
    """A shipment made up of one or more parcels."""

    def __init__(self, client: "StartrackClient"):
        self._client = client
        self.shipment_reference: Optional[str] = None
        self.customer_reference_1: str = ""
        self.customer_reference_2: str = ""
        self.email_tracking_enabled: bool = False
        self.movement_type: MovementType = MovementType.DESPATCH
        self.from_address: Optional[Address] = None
        self.to_address: Optional[Address] = None
        self.parcels: List[Parcel] = []
        self.delivery_instructions: str = ""

        # The StarTrack product to use for this shipment
        self.product_id: Optional[str] = None

        # Set when lodged
        self.shipment_id: Optional[str] = None
        self.shipment_lodged_at: Optional[datetime] = None

    def __repr__(self) -> str:
        return f"Shipment(shipment_id={self.shipment_id!r}, parcels={len(self.parcels)})"

    @property
    def is_lodged(self) -> bool:
        return self.shipment_id is not None

    def set_to(self, address: Address) -> "Shipment":
        """Set the address to deliver to."""
        self.to_address = address
        return self

    def set_from(self, address: Address) -> "Shipment":
        """Set the address to send from."""
        self.from_address = address
        return self

    def set_movement_type(self, movement_type) -> "Shipment":
        """Set the movement type: DESPATCH, RETURN or TRANSFER."""
        self.movement_type = MovementType(movement_type)
        return self

    def add_parcel(self, parcel: Parcel) -> "Shipment":
        self.parcels.append(parcel)
        return self

    async def get_quotes(self, urgent: bool = False) -> Dict[str, float]:
        """
        Quote this shipment.

        Args:
            urgent: Only return urgent products (FPP, PRM)

        Returns:
            product_id -> total cost, cheapest first
        """
        request = build_quote_request(self)
        return await self._client.get_quotes(request, urgent, max_dimension(self.parcels))

    async def lodge_shipment(self, mode: Optional[ReconciliationMode] = None) -> "Shipment":
        """
        Lodge this shipment and record the carrier-assigned ids.

        Args:
            mode: How returned items are matched to parcels. Defaults to the
                client's configured mode (legacy unless configured otherwise).
        """
        request = build_shipment_request(self)
        response = await self._client.shipments(request)
        reconcile(self, response, mode or self._client.reconciliation_mode)
        logger.info(f"Lodged shipment {self.shipment_id} with {len(self.parcels)} parcels")
        return self

    def _require_lodged(self) -> str:
        if not self.shipment_id:
            raise ShipmentStateError("Shipment has not been lodged")
        return self.shipment_id

    async def get_label(self, label_type: Optional[LabelType] = None) -> str:
        """Get the label url for this shipment."""
        self._require_lodged()
        return await self._client.get_labels([self.shipment_id], label_type or LabelType())

    async def delete_shipment(self) -> bool:
        return await self._client.delete_shipment(self._require_lodged())

    async def delete_shipment_by_id(self, shipment_id: str) -> bool:
        return await self._client.delete_shipment(shipment_id)
