"""Label template definitions."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class TemplateId(str, Enum):
    """Closed set of label layouts."""

    STANDARD = "standard"
    COMPACT = "compact"
    DETAILED = "detailed"
    QR_ONLY = "qrOnly"


@dataclass(frozen=True)
class LabelTemplate:
    """Physical label size and display metadata for one template."""

    id: TemplateId
    name: str
    width_mm: float
    height_mm: float
    description: str

    @property
    def css_class(self) -> str:
        return f"label-{self.id.value}"
