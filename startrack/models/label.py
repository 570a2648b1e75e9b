"""Label print preferences."""
from dataclasses import dataclass


@dataclass
class LabelType:
    format: str = "PDF"
    layout_type: str = "A4-1pp"
    branded: bool = True
    left_offset: int = 0
    top_offset: int = 0
