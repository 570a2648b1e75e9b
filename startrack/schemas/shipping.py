"""
Shipping Schemas for the StarTrack API

Pydantic models for every request body the client sends and every
response body it reads. Requests are validated when built; responses are
validated when parsed so schema drift fails loudly at the boundary.
"""
from typing import Optional, List, Dict, Any
from pydantic import BaseModel, ConfigDict, Field, field_validator


class WireModel(BaseModel):
    """Base for request bodies."""
    model_config = ConfigDict(populate_by_name=True)

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class ResponseModel(BaseModel):
    """Base for response bodies; unknown carrier fields are kept."""
    model_config = ConfigDict(populate_by_name=True, extra="allow", coerce_numbers_to_str=True)


# ==================== Shared ====================


class TransitCoverAttributes(WireModel):
    cover_amount: float = Field(..., gt=0)


class TransitCover(WireModel):
    attributes: TransitCoverAttributes


class ItemFeatures(WireModel):
    transit_cover: TransitCover = Field(..., alias="TRANSIT_COVER")

    @classmethod
    def for_value(cls, value: Optional[float]) -> Optional["ItemFeatures"]:
        """Transit cover for a declared value, or None when value is unset or not positive."""
        if not value or value <= 0:
            return None
        return cls(transit_cover=TransitCover(attributes=TransitCoverAttributes(cover_amount=value)))


class ShipmentRef(WireModel):
    shipment_id: str = Field(..., min_length=1)


class CarrierErrorEntry(ResponseModel):
    code: Optional[str] = None
    name: Optional[str] = None
    message: str = ""
    field: Optional[str] = None


# ==================== Quote Schemas ====================


class QuoteLocation(WireModel):
    suburb: str
    postcode: str
    state: str


class QuoteItem(WireModel):
    packaging_type: str = "ITM"
    length: float = Field(..., gt=0)
    height: float = Field(..., gt=0)
    width: float = Field(..., gt=0)
    weight: float = Field(..., gt=0)
    features: Optional[ItemFeatures] = None


class QuoteShipment(WireModel):
    from_: QuoteLocation = Field(..., alias="from")
    to: QuoteLocation
    items: List[QuoteItem] = Field(..., min_length=1)


class QuoteRequest(WireModel):
    shipments: List[QuoteShipment] = Field(..., min_length=1)


class QuoteResponseItem(ResponseModel):
    product_id: str


class QuoteSummary(ResponseModel):
    total_cost: float = 0.0


class QuoteResponseShipment(ResponseModel):
    items: List[QuoteResponseItem] = []
    shipment_summary: QuoteSummary = QuoteSummary()
    errors: List[CarrierErrorEntry] = []


class QuoteResponse(ResponseModel):
    shipments: List[QuoteResponseShipment] = []


# ==================== Shipment Schemas ====================


class AddressBlock(WireModel):
    name: str = ""
    business_name: str = ""
    lines: List[str] = []
    suburb: str = ""
    state: str = ""
    postcode: str = ""
    country: str = "AU"
    phone: str = ""
    email: str = ""


class ToAddressBlock(AddressBlock):
    delivery_instructions: str = ""


class ShipmentItem(WireModel):
    item_reference: Optional[str] = None
    product_id: Optional[str] = None
    length: float = Field(..., gt=0)
    height: float = Field(..., gt=0)
    width: float = Field(..., gt=0)
    weight: float = Field(..., gt=0)
    contains_dangerous_goods: bool = False
    authority_to_leave: bool = False
    safe_drop_enabled: bool = False
    allow_partial_delivery: bool = False
    packaging_type: str = "CTN"
    features: Optional[ItemFeatures] = None


class ShipmentRequest(WireModel):
    shipment_reference: Optional[str] = None
    customer_reference_1: str = ""
    customer_reference_2: str = ""
    email_tracking_enabled: bool = False
    movement_type: str = "DESPATCH"
    from_: AddressBlock = Field(..., alias="from")
    to: ToAddressBlock
    items: List[ShipmentItem] = Field(..., min_length=1)

    @field_validator("movement_type")
    @classmethod
    def validate_movement_type(cls, v):
        if v not in ("DESPATCH", "RETURN", "TRANSFER"):
            raise ValueError(f"Unsupported movement type: {v}")
        return v


class ShipmentsRequest(WireModel):
    # A single shipment object, not a list
    shipments: ShipmentRequest


class TrackingDetails(ResponseModel):
    article_id: Optional[str] = None
    consignment_id: Optional[str] = None


class LodgedItem(ResponseModel):
    item_id: Optional[str] = None
    item_reference: Optional[str] = None
    tracking_details: TrackingDetails = TrackingDetails()


class LodgedShipment(ResponseModel):
    shipment_id: str
    shipment_reference: Optional[str] = None
    shipment_creation_date: Optional[str] = None
    items: List[LodgedItem] = []


class ShipmentsResponse(ResponseModel):
    shipments: List[LodgedShipment] = []


# ==================== Label Schemas ====================


class LabelGroup(WireModel):
    group: str
    layout: str
    branded: bool
    left_offset: int = 0
    top_offset: int = 0


class LabelPreferences(WireModel):
    type: str = "PRINT"
    format: str = "PDF"
    groups: List[LabelGroup]


class LabelRequest(WireModel):
    wait_for_label_url: bool = True
    preferences: LabelPreferences
    shipments: List[ShipmentRef] = Field(..., min_length=1)


class LabelEntry(ResponseModel):
    request_id: Optional[str] = None
    url: str = ""
    status: Optional[str] = None


class LabelResponse(ResponseModel):
    labels: List[LabelEntry] = []


# ==================== Order Schemas ====================


class OrderRequest(WireModel):
    shipments: List[ShipmentRef] = Field(..., min_length=1)


class OrderBlock(ResponseModel):
    order_id: str
    order_reference: Optional[str] = None
    order_creation_date: Optional[str] = None
    shipments: List[Dict[str, Any]] = []


class OrderResponse(ResponseModel):
    order: OrderBlock
