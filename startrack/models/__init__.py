from startrack.models.account import Account, MERCHANT_LOCATION
from startrack.models.address import Address
from startrack.models.label import LabelType
from startrack.models.order import Order
from startrack.models.parcel import Parcel
from startrack.models.shipment import MovementType, Shipment

__all__ = [
    "Account",
    "Address",
    "LabelType",
    "MERCHANT_LOCATION",
    "MovementType",
    "Order",
    "Parcel",
    "Shipment",
]
