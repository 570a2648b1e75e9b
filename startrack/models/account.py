"""Account details returned by GET accounts/{account_number}."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from startrack.core.utils import parse_timestamp
from startrack.models.address import Address

MERCHANT_LOCATION = "MERCHANT_LOCATION"


@dataclass
class Account:
    account_number: str
    name: str = ""
    valid_from: Optional[datetime] = None
    valid_to: Optional[datetime] = None
    expired: bool = False
    addresses: List[Address] = field(default_factory=list)
    postage_products: List[Dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Account":
        return cls(
            account_number=str(data.get("account_number") or ""),
            name=data.get("name") or "",
            valid_from=parse_timestamp(data.get("valid_from")),
            valid_to=parse_timestamp(data.get("valid_to")),
            expired=bool(data.get("expired", False)),
            addresses=[Address.from_api(a) for a in data.get("addresses") or [] if isinstance(a, dict)],
            postage_products=list(data.get("postage_products") or []),
        )

    def merchant_address(self) -> Optional[Address]:
        """First address of type MERCHANT_LOCATION, if any."""
        for address in self.addresses:
            if address.type == MERCHANT_LOCATION:
                return address
        return None
