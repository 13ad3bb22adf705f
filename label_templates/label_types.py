from __future__ import annotations

from dataclasses import dataclass

from .base import TemplateId


@dataclass(frozen=True)
class LabelSettings:
    """Options chosen for one label generation run."""

    template: TemplateId | str = TemplateId.STANDARD
    include_qr: bool = True
    include_location: bool = True
    include_date: bool = True


@dataclass(frozen=True)
class LabelRecord:
    """Per-item snapshot used to render one label."""

    code: str
    name: str
    category: str
    location: str
    qr_url: str
    date: str
    template: TemplateId


@dataclass(frozen=True)
class LabelGeometry:
    left: float
    bottom: float
    right: float
    top: float

    on_new_page: bool

    @property
    def width(self) -> float:
        return max(self.right - self.left, 0.0)

    @property
    def height(self) -> float:
        return max(self.top - self.bottom, 0.0)
