"""
Parcel value object.

Reconciliation after lodgement writes item_id and the tracking ids onto
the parcel in place.
"""
from dataclasses import dataclass
from typing import Optional


@dataclass
class Parcel:
    """A single item in a shipment."""
    length: float = 0.0  # cm
    height: float = 0.0  # cm
    width: float = 0.0  # cm
    weight: float = 0.0  # kg
    value: Optional[float] = None  # declared value; > 0 adds transit cover
    item_reference: Optional[str] = None
    contains_dangerous_goods: bool = False
    authority_to_leave: bool = False
    safe_drop_enabled: bool = False
    allow_partial_delivery: bool = False
    packaging_type: str = "CTN"
    product_id: Optional[str] = None

    # Assigned by the carrier on lodgement
    item_id: Optional[str] = None
    tracking_article_id: Optional[str] = None
    tracking_consignment_id: Optional[str] = None

    @property
    def max_dimension(self) -> float:
        return max(self.length, self.height, self.width)

    def has_positive_measurements(self) -> bool:
        return all(v > 0 for v in (self.length, self.height, self.width, self.weight))
