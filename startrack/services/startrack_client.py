"""
StarTrack API Client

One method per upstream endpoint:
- GET    accounts/{account}                         account details
- POST   prices/shipments                           quotes
- POST   shipments                                  lodge shipments
- POST   labels                                     label print url
- PUT    orders                                     create order (manifest)
- GET    accounts/{account}/orders/{order}/summary  manifest pdf
- DELETE shipments/{id}                             delete shipment

Carrier errors abort the operation with the carrier's message. Transport
errors are raised by the gateway and propagated unchanged.
"""
import logging
from typing import Dict, Iterable, List, Optional

import httpx
from pydantic import ValidationError

from startrack.core.config import Settings, get_settings
from startrack.core.exceptions import DecodeError
from startrack.core.http_client import CarrierGateway
from startrack.models.account import Account
from startrack.models.address import Address
from startrack.models.label import LabelType
from startrack.models.order import Order
from startrack.models.shipment import Shipment
from startrack.schemas.shipping import (
    LabelGroup,
    LabelPreferences,
    LabelRequest,
    LabelResponse,
    OrderRequest,
    OrderResponse,
    QuoteRequest,
    ShipmentRef,
    ShipmentsRequest,
    ShipmentsResponse,
)
from startrack.services.lodgement import ReconciliationMode
from startrack.services.quotes import filter_quotes

logger = logging.getLogger(__name__)

# Every label request prints all of these groups with the same layout
LABEL_GROUPS = (
    "Parcel Post",
    "Express Post",
    "StarTrack",
    "Startrack Courier",
    "On Demand",
    "International",
    "Commercial",
)


def _shipment_refs(shipment_ids: Iterable[str]) -> List[ShipmentRef]:
    return [ShipmentRef(shipment_id=shipment_id) for shipment_id in shipment_ids]


def build_label_request(shipment_ids: Iterable[str], label_type: LabelType) -> LabelRequest:
    groups = [
        LabelGroup(
            group=group,
            layout=label_type.layout_type,
            branded=label_type.branded,
            left_offset=label_type.left_offset,
            top_offset=label_type.top_offset,
        )
        for group in LABEL_GROUPS
    ]
    return LabelRequest(
        wait_for_label_url=True,
        preferences=LabelPreferences(type="PRINT", format=label_type.format, groups=groups),
        shipments=_shipment_refs(shipment_ids),
    )


class StartrackClient:
    """
    Client for the StarTrack / Australia Post shipping API.

    Usage:
        async with StartrackClient(key, password, account, test_mode=True) as client:
            shipment = client.new_shipment().set_from(sender).set_to(receiver).add_parcel(parcel)
            quotes = await shipment.get_quotes()
    """

    def __init__(
        self,
        api_key: str,
        api_password: str,
        account_number: str,
        test_mode: bool = False,
        timeout: Optional[float] = None,
        host: Optional[str] = None,
        reconciliation_mode: ReconciliationMode = ReconciliationMode.LEGACY,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        gateway_kwargs = {}
        if timeout is not None:
            gateway_kwargs["timeout"] = timeout
        if host is not None:
            gateway_kwargs["host"] = host
        self.account_number = account_number
        self.reconciliation_mode = ReconciliationMode(reconciliation_mode)
        self.gateway = CarrierGateway(
            api_key,
            api_password,
            account_number,
            test_mode=test_mode,
            transport=transport,
            **gateway_kwargs,
        )

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "StartrackClient":
        """Create a client from STARTRACK_* settings."""
        settings = settings or get_settings()
        return cls(
            api_key=settings.STARTRACK_API_KEY,
            api_password=settings.STARTRACK_API_PASSWORD,
            account_number=settings.STARTRACK_ACCOUNT_NUMBER,
            test_mode=settings.STARTRACK_TEST_MODE,
            timeout=settings.STARTRACK_TIMEOUT,
            host=settings.STARTRACK_API_HOST,
            reconciliation_mode=ReconciliationMode(settings.STARTRACK_RECONCILIATION_MODE),
            transport=transport,
        )

    async def __aenter__(self):
        await self.gateway.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self):
        await self.gateway.close()

    # ==================== Account ====================

    async def get_account_details(self) -> Account:
        """Fetch the account record, including its addresses."""
        response = await self.gateway.get(f"accounts/{self.account_number}", include_account=False)
        return Account.from_api(response.json_object())

    async def get_merchant_address(self) -> Optional[Address]:
        """The account's MERCHANT_LOCATION address, if it has one."""
        account = await self.get_account_details()
        return account.merchant_address()

    # ==================== Quotes ====================

    async def get_quotes(
        self,
        request: QuoteRequest,
        urgent: bool = False,
        max_dimension: int = 0,
    ) -> Dict[str, float]:
        """
        Get prices for a quote request.

        Args:
            request: prices/shipments body
            urgent: Only keep urgent products (FPP, PRM)
            max_dimension: Largest parcel dimension (whole cm) in the request

        Returns:
            product_id -> total cost, cheapest first
        """
        logger.debug(f"Requesting quotes (urgent={urgent}, max_dimension={max_dimension})")
        response = await self.gateway.post("prices/shipments", request.to_wire())
        return filter_quotes(response.json_object(), urgent)

    # ==================== Shipments ====================

    def new_shipment(self) -> Shipment:
        """Start a new shipment for lodging or quoting."""
        return Shipment(self)

    async def shipments(self, request: ShipmentsRequest) -> ShipmentsResponse:
        """Lodge a shipment request and return the carrier's shipments."""
        response = await self.gateway.post("shipments", request.to_wire())
        try:
            return ShipmentsResponse.model_validate(response.json_object())
        except ValidationError as e:
            raise DecodeError("Unexpected shipments response from carrier", details={"errors": e.errors()}) from e

    async def delete_shipment(self, shipment_id: str) -> bool:
        """
        Delete a shipment by id.

        Returns True unless the carrier reports an error, which raises.
        """
        await self.gateway.delete(f"shipments/{shipment_id}")
        logger.info(f"Deleted shipment {shipment_id}")
        return True

    # ==================== Labels ====================

    async def get_labels(self, shipment_ids: Iterable[str], label_type: LabelType) -> str:
        """
        Get the label for the given shipments.

        Returns:
            Url of the first returned label, or "" if none was returned
        """
        request = build_label_request(shipment_ids, label_type)
        response = await self.gateway.post("labels", request.to_wire())
        try:
            labels = LabelResponse.model_validate(response.json_object())
        except ValidationError as e:
            raise DecodeError("Unexpected labels response from carrier", details={"errors": e.errors()}) from e

        for label in labels.labels:
            return label.url
        return ""

    # ==================== Orders ====================

    async def create_order(self, shipment_ids: Iterable[str]) -> Order:
        """
        Create an order for the given shipments and fetch its manifest.

        A raw (non-JSON) answer is the manifest itself; it is returned as an
        Order with order_id "None".
        """
        shipment_ids = list(shipment_ids)
        request = OrderRequest(shipments=_shipment_refs(shipment_ids))
        response = await self.gateway.put("orders", request.to_wire())

        if not response.is_structured:
            logger.info(f"Order request for {len(shipment_ids)} shipments returned a raw manifest")
            return Order.from_raw_manifest(response.content)

        try:
            order = OrderResponse.model_validate(response.data).order
        except ValidationError as e:
            raise DecodeError("Unexpected orders response from carrier", details={"errors": e.errors()}) from e

        summary = await self.gateway.get(f"accounts/{self.account_number}/orders/{order.order_id}/summary")
        # Errors in the summary were raised by the gateway; the raw body is the manifest
        result = Order.from_api(order.model_dump(), manifest_pdf=summary.content)
        if not result.shipment_ids:
            result.shipment_ids = shipment_ids
        logger.info(f"Created order {result.order_id} for {len(shipment_ids)} shipments")
        return result
