"""Compose printable HTML documents from label batches."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Sequence

from jinja2 import Environment, select_autoescape
from markupsafe import Markup

from . import get_template, list_templates
from .base import LabelTemplate, TemplateId
from .label_types import LabelRecord
from .render import LabelView, label_markup, render_label

__all__ = [
    "DIRECT_PRINT",
    "PAGINATED_EXPORT",
    "LayoutProfile",
    "build_cells",
    "compose",
    "layout_profile",
    "template_css",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LayoutProfile:
    """Grid and page parameters of one output mode."""

    name: str
    columns: int | None
    gap_mm: float
    page_size: str | None = None
    page_margin_mm: float | None = None
    cell_border: str = "1px dashed #999"
    auto_print: bool = True

    def grid_columns(self, template: LabelTemplate) -> str:
        if self.columns:
            return f"repeat({self.columns}, 1fr)"
        return f"repeat(auto-fit, minmax({template.width_mm:g}mm, max-content))"


DIRECT_PRINT = LayoutProfile(
    name="print",
    columns=None,
    gap_mm=5,
    cell_border="1px dashed #999",
)

PAGINATED_EXPORT = LayoutProfile(
    name="export",
    columns=4,
    gap_mm=2,
    page_size="A4",
    page_margin_mm=10,
    cell_border="1px solid #ccc",
)

_PROFILES = {profile.name: profile for profile in (DIRECT_PRINT, PAGINATED_EXPORT)}


def layout_profile(name: str) -> LayoutProfile:
    """Return the profile called ``name`` (``print`` or ``export``)."""

    try:
        return _PROFILES[name]
    except KeyError:
        available = ", ".join(sorted(_PROFILES))
        raise ValueError(
            f"Unknown layout '{name}'. Available layouts: {available}"
        ) from None


def template_css(templates: Iterable[LabelTemplate] | None = None) -> str:
    """Return the sizing rules for every template class."""

    rules = []
    for template in templates if templates is not None else list_templates():
        selector = f".{template.css_class}"
        rules.append(
            f"{selector} {{ width: {template.width_mm:g}mm; "
            f"height: {template.height_mm:g}mm; }}"
        )
        if template.id is TemplateId.QR_ONLY:
            rules.append(
                f"{selector} {{ padding: 0; align-items: center; justify-content: center; }}"
            )
            rules.append(f"{selector} .label-qr {{ width: 100%; height: 100%; }}")
        else:
            qr_size = min(template.height_mm * 0.5, 20)
            rules.append(
                f"{selector} .label-qr {{ width: {qr_size:g}mm; height: {qr_size:g}mm; }}"
            )
    return "\n".join(rules)


def build_cells(
    records: Sequence[LabelRecord],
    include_qr: bool = True,
    include_location: bool = True,
    include_date: bool = True,
) -> list[LabelView]:
    """Render every record with its own template, keeping batch order."""

    return [
        render_label(
            record,
            record.template,
            include_qr,
            include_location,
            include_date,
        )
        for record in records
    ]


_DOCUMENT_TEMPLATE = """<!DOCTYPE html>
<html lang="pt-BR">
<head>
<meta charset="utf-8">
<title>{{ title }}</title>
<style>
{% if profile.page_size %}@page { size: {{ profile.page_size }}; margin: {{ profile.page_margin_mm }}mm; }
{% endif %}body { font-family: Arial, Helvetica, sans-serif; margin: {{ 0 if profile.page_size else 10 }}mm; }
.labels-grid { display: grid; grid-template-columns: {{ grid_columns }}; gap: {{ profile.gap_mm }}mm; }
.label { box-sizing: border-box; border: {{ profile.cell_border }}; padding: 1.5mm; overflow: hidden; display: flex; flex-direction: column; break-inside: avoid; page-break-inside: avoid; }
.label-code { font-weight: bold; font-size: 11pt; }
.label-name { font-size: 8pt; white-space: nowrap; overflow: hidden; text-overflow: ellipsis; }
.label-location, .label-date { font-size: 7pt; color: #333; }
{{ template_css }}
@media print { body { -webkit-print-color-adjust: exact; print-color-adjust: exact; } }
</style>
</head>
<body data-template="{{ active_template }}" data-layout="{{ profile.name }}">
<div class="labels-grid">
{% for cell in cells %}{{ cell }}
{% endfor %}</div>
{% if profile.auto_print %}<script>window.addEventListener("load", function () { window.print(); });</script>
{% endif %}</body>
</html>
"""

_env = Environment(autoescape=select_autoescape(default=True, default_for_string=True))
_document = _env.from_string(_DOCUMENT_TEMPLATE)


def compose(
    records: Sequence[LabelRecord],
    active_template_id: TemplateId | str,
    profile: LayoutProfile = DIRECT_PRINT,
    *,
    include_qr: bool = True,
    include_location: bool = True,
    include_date: bool = True,
    title: str = "Etiquetas",
) -> str:
    """Return a standalone HTML document with one label cell per record."""

    active_template = get_template(active_template_id)
    cells = [
        label_markup(view)
        for view in build_cells(records, include_qr, include_location, include_date)
    ]
    logger.info(
        "Composed %d label(s) with layout %s (template %s)",
        len(cells),
        profile.name,
        active_template.id.value,
    )
    return _document.render(
        title=title,
        profile=profile,
        grid_columns=profile.grid_columns(active_template),
        template_css=Markup(template_css()),
        active_template=active_template.id.value,
        cells=cells,
    )
