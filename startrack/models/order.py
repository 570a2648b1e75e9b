"""Order (manifest) value object."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from startrack.core.utils import parse_timestamp, utcnow

# order_id used when the carrier answers an order request with a raw manifest
UNSTRUCTURED_ORDER_ID = "None"


@dataclass
class Order:
    order_id: str
    creation_date: datetime = field(default_factory=utcnow)
    manifest_pdf: Optional[bytes] = None
    order_reference: Optional[str] = None
    shipment_ids: List[str] = field(default_factory=list)

    @property
    def is_unstructured(self) -> bool:
        return self.order_id == UNSTRUCTURED_ORDER_ID

    @classmethod
    def from_raw_manifest(cls, manifest_pdf: bytes) -> "Order":
        return cls(order_id=UNSTRUCTURED_ORDER_ID, creation_date=utcnow(), manifest_pdf=manifest_pdf)

    @classmethod
    def from_api(cls, data: Dict[str, Any], manifest_pdf: Optional[bytes] = None) -> "Order":
        """Build from the `order` block of an orders response."""
        shipment_ids = [
            s["shipment_id"] for s in data.get("shipments") or []
            if isinstance(s, dict) and s.get("shipment_id")
        ]
        return cls(
            order_id=str(data["order_id"]),
            creation_date=parse_timestamp(data.get("order_creation_date")) or utcnow(),
            manifest_pdf=manifest_pdf,
            order_reference=data.get("order_reference"),
            shipment_ids=shipment_ids,
        )
