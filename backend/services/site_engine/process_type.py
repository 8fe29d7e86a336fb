"""
Process type model: a rectangular footprint the generator can place.
"""

from dataclasses import asdict, dataclass, replace
from typing import Any, Dict


@dataclass(frozen=True)
class ProcessType:
    """A catalog entry: footprint size in meters plus display data."""

    id: str
    label: str
    width: float
    height: float
    color: str = "#0ea5e9"
    enabled: bool = True

    def with_enabled(self, enabled: bool) -> "ProcessType":
        return replace(self, enabled=enabled)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProcessType":
        """Accepts ``width``/``height`` or the short ``w``/``h`` keys."""
        return cls(
            id=str(data["id"]),
            label=data.get("label") or str(data["id"]),
            width=float(data.get("width", data.get("w"))),
            height=float(data.get("height", data.get("h"))),
            color=data.get("color", "#0ea5e9"),
            enabled=bool(data.get("enabled", True)),
        )
