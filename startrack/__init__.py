"""
StarTrack / Australia Post shipping API client.

Quote, lodge, label, manifest and delete shipments.
"""
from startrack.core.config import Settings, get_settings
from startrack.core.exceptions import (
    CarrierError,
    DecodeError,
    ReconciliationError,
    ShipmentError,
    ShipmentStateError,
    ShipmentValidationError,
    StartrackError,
    TransportError,
)
from startrack.models import (
    Account,
    Address,
    LabelType,
    MovementType,
    Order,
    Parcel,
    Shipment,
)
from startrack.services.lodgement import ReconciliationMode
from startrack.services.startrack_client import StartrackClient

__version__ = "1.0.0"

__all__ = [
    "Account",
    "Address",
    "CarrierError",
    "DecodeError",
    "LabelType",
    "MovementType",
    "Order",
    "Parcel",
    "ReconciliationError",
    "ReconciliationMode",
    "Settings",
    "Shipment",
    "ShipmentError",
    "ShipmentStateError",
    "ShipmentValidationError",
    "StartrackClient",
    "StartrackError",
    "TransportError",
    "get_settings",
]
