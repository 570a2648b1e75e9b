"""Address value object."""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

DOMESTIC_COUNTRY = "AU"


@dataclass
class Address:
    """A sender, receiver or account address."""
    name: str = ""
    business_name: str = ""
    lines: List[str] = field(default_factory=list)
    suburb: str = ""
    state: str = ""
    postcode: str = ""
    country: str = DOMESTIC_COUNTRY
    phone: str = ""
    email: str = ""
    type: Optional[str] = None  # e.g. MERCHANT_LOCATION on account addresses

    @property
    def is_domestic(self) -> bool:
        return self.country == DOMESTIC_COUNTRY

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Address":
        """Build from an address block in an account response."""
        lines = data.get("lines") or []
        if isinstance(lines, str):
            lines = [lines]
        return cls(
            name=data.get("name") or "",
            business_name=data.get("business_name") or "",
            lines=list(lines),
            suburb=data.get("suburb") or "",
            state=data.get("state") or "",
            postcode=data.get("postcode") or "",
            country=data.get("country") or DOMESTIC_COUNTRY,
            phone=data.get("phone") or "",
            email=data.get("email") or "",
            type=data.get("type"),
        )
