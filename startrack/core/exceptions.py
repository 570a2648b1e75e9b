"""
StarTrack Client Exception Hierarchy

Every exception carries code, message and details so callers can log or
serialize failures without string parsing.

Exception Hierarchy:
    StartrackError
    ├── CarrierError
    │   └── ReconciliationError
    ├── TransportError
    ├── DecodeError
    └── ShipmentError
        ├── ShipmentValidationError
        └── ShipmentStateError
"""
import logging
from typing import Optional, Dict, Any, List

logger = logging.getLogger(__name__)


class StartrackError(Exception):
    """
    Base exception for all StarTrack client errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code for programmatic handling
        details: Additional context for debugging
        severity: P0-P3 severity level
    """

    default_code: str = "STARTRACK_ERROR"
    default_severity: str = "P2"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        severity: Optional[str] = None,
    ):
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}
        self.severity = severity or self.default_severity
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "severity": self.severity,
            "details": self.details,
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


# =============================================================================
# CARRIER ERRORS
# =============================================================================

class CarrierError(StartrackError):
    """The carrier reported one or more errors for the request."""
    default_code = "CARRIER_ERROR"
    default_severity = "P1"

    def __init__(
        self,
        message: str,
        errors: Optional[List[Dict[str, Any]]] = None,
        status_code: Optional[int] = None,
        **kwargs
    ):
        details = kwargs.pop("details", {})
        details.update({
            "errors": errors or [],
            "status_code": status_code,
        })
        self.errors = errors or []
        self.status_code = status_code
        super().__init__(message, details=details, **kwargs)

    @classmethod
    def from_errors(cls, errors: List[Dict[str, Any]], status_code: Optional[int] = None) -> "CarrierError":
        """Build from a carrier `errors` array, using the first entry's message verbatim."""
        first = errors[0] if errors else {}
        if isinstance(first, dict):
            message = first.get("message") or "Unknown carrier error"
            code = first.get("code")
            if code is not None:
                code = str(code)
        else:
            message = str(first)
            code = None
        return cls(message, errors=errors, status_code=status_code, code=code)


class ReconciliationError(CarrierError):
    """Returned shipment items could not be matched to local parcels."""
    default_code = "RECONCILIATION_FAILED"


# =============================================================================
# TRANSPORT ERRORS
# =============================================================================

class TransportError(StartrackError):
    """Connection, TLS or timeout failure talking to the carrier."""
    default_code = "NETWORK_ERROR"
    default_severity = "P1"


class DecodeError(StartrackError):
    """A structured JSON body was required but an opaque body was returned."""
    default_code = "DECODE_ERROR"


# =============================================================================
# SHIPMENT ERRORS
# =============================================================================

class ShipmentError(StartrackError):
    """Base exception for local shipment problems."""
    default_code = "SHIPMENT_ERROR"


class ShipmentValidationError(ShipmentError):
    """Shipment is missing data required for the operation."""
    default_code = "SHIPMENT_INVALID"
    default_severity = "P3"


class ShipmentStateError(ShipmentError):
    """Operation is not allowed in the shipment's current lifecycle state."""
    default_code = "SHIPMENT_STATE"
    default_severity = "P3"

    def __init__(self, message: str, shipment_id: Optional[str] = None, **kwargs):
        details = kwargs.pop("details", {})
        details["shipment_id"] = shipment_id
        super().__init__(message, details=details, **kwargs)
