"""PDF output for label batches."""

from __future__ import annotations

import logging
from io import BytesIO
from typing import Any, BinaryIO, Sequence
from urllib.parse import parse_qs, urlsplit

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from . import get_template
from .base import LabelTemplate, TemplateId
from .label_types import LabelGeometry, LabelRecord
from .qr import qr_png
from .render import CODE, NAME, QR, LabelView, render_label
from .utils import ellipsize, shrink_fit

logger = logging.getLogger(__name__)

PAGE_SIZE = A4

MAX_COLS = 4
MARGIN = 10 * mm
H_GAP = 2 * mm
V_GAP = 2 * mm

LABEL_PADDING = 1.5 * mm
QR_TEXT_GAP = 1 * mm
QR_MAX_SIZE = 20 * mm

BOLD_FONT = "Helvetica-Bold"
REG_FONT = "Helvetica"
CODE_FONT_MAX = 11
CODE_FONT_MIN = 6
NAME_FONT = 8
INFO_FONT = 7
LINE_GAP = 1.2


class SheetLayout:
    """Stateful slot allocator for A4 label sheets."""

    def __init__(self, label_width: float, label_height: float) -> None:
        self.label_width = label_width
        self.label_height = label_height

        page_width, page_height = PAGE_SIZE
        usable_w = page_width - 2 * MARGIN
        usable_h = page_height - 2 * MARGIN
        fit_cols = int((usable_w + H_GAP) // (label_width + H_GAP))
        fit_rows = int((usable_h + V_GAP) // (label_height + V_GAP))
        self.cols = max(1, min(MAX_COLS, fit_cols))
        self.rows = max(1, fit_rows)
        self.reset()

    @classmethod
    def for_templates(cls, templates: Sequence[LabelTemplate]) -> "SheetLayout":
        """Size slots to fit the largest template of a batch."""

        width = max(template.width_mm for template in templates) * mm
        height = max(template.height_mm for template in templates) * mm
        return cls(width, height)

    @property
    def slots_per_page(self) -> int:
        return self.rows * self.cols

    def reset(self) -> None:
        self._slot_index = 0

    def next_geometry(self) -> LabelGeometry:
        row = self._slot_index // self.cols
        col = self._slot_index % self.cols

        _, page_height = PAGE_SIZE
        top = page_height - MARGIN - row * (self.label_height + V_GAP)
        bottom = top - self.label_height
        left = MARGIN + col * (self.label_width + H_GAP)
        right = left + self.label_width
        on_new_page = self._slot_index == 0
        self._slot_index = (self._slot_index + 1) % self.slots_per_page

        return LabelGeometry(left, bottom, right, top, on_new_page)


def render_pdf(
    output: str | BinaryIO,
    records: Sequence[LabelRecord],
    active_template_id: TemplateId | str,
    *,
    include_qr: bool = True,
    include_location: bool = True,
    include_date: bool = True,
    skip: int = 0,
    draw_outline: bool = False,
) -> str:
    """Render ``records`` onto A4 sheets and write the PDF to ``output``."""

    if skip < 0:
        raise ValueError("skip must not be negative")

    templates = [get_template(record.template) for record in records]
    layout = SheetLayout.for_templates(templates or [get_template(active_template_id)])
    canvas_obj = canvas.Canvas(output, pagesize=PAGE_SIZE)

    for _ in range(skip):
        layout.next_geometry()

    first_page = True
    for record in records:
        geometry = layout.next_geometry()
        if geometry.on_new_page:
            if first_page:
                first_page = False
            else:
                canvas_obj.showPage()

        view = render_label(
            record,
            record.template,
            include_qr,
            include_location,
            include_date,
        )
        label_w = view.template.width_mm * mm
        label_h = view.template.height_mm * mm
        left = geometry.left
        bottom = geometry.top - label_h
        _draw_label(canvas_obj, view, left, bottom, label_w, label_h)

        if draw_outline:
            canvas_obj.saveState()
            canvas_obj.setLineWidth(0.5)
            canvas_obj.rect(left, bottom, label_w, label_h)
            canvas_obj.restoreState()

    canvas_obj.showPage()
    canvas_obj.save()
    logger.info("Rendered %d label(s) to PDF", len(records))
    name = output if isinstance(output, str) else "PDF stream"
    return f"Wrote {len(records)} label(s) to {name}"


def render_pdf_bytes(
    records: Sequence[LabelRecord],
    active_template_id: TemplateId | str,
    **options: Any,
) -> bytes:
    buffer = BytesIO()
    render_pdf(buffer, records, active_template_id, **options)
    return buffer.getvalue()


def _draw_label(
    canvas_obj: canvas.Canvas,
    view: LabelView,
    left: float,
    bottom: float,
    width: float,
    height: float,
) -> None:
    qr_url = view.value(QR)

    if view.template.id is TemplateId.QR_ONLY:
        size = min(width, height) - LABEL_PADDING
        _draw_qr(
            canvas_obj,
            qr_url or "",
            left + (width - size) / 2,
            bottom + (height - size) / 2,
            size,
        )
        return

    text_width = width - 2 * LABEL_PADDING
    if qr_url is not None:
        qr_size = min(height - 2 * LABEL_PADDING, QR_MAX_SIZE)
        text_width -= qr_size + QR_TEXT_GAP
        _draw_qr(
            canvas_obj,
            qr_url,
            left + width - LABEL_PADDING - qr_size,
            bottom + height - LABEL_PADDING - qr_size,
            qr_size,
        )

    text_x = left + LABEL_PADDING
    y = bottom + height - LABEL_PADDING
    for field in view.fields:
        if field.kind == QR:
            continue
        if field.kind == CODE:
            size = shrink_fit(
                field.value,
                text_width,
                max_font=CODE_FONT_MAX,
                min_font=CODE_FONT_MIN,
                font_name=BOLD_FONT,
            )
            font = BOLD_FONT
            text = ellipsize(field.value, font, size, text_width)
        else:
            font = REG_FONT
            size = NAME_FONT if field.kind == NAME else INFO_FONT
            text = ellipsize(field.value, font, size, text_width)

        y -= size
        if y < bottom + LABEL_PADDING / 2:
            break
        canvas_obj.setFont(font, size)
        canvas_obj.drawString(text_x, y, text)
        y -= size * (LINE_GAP - 1)


def _draw_qr(
    canvas_obj: canvas.Canvas,
    qr_url: str,
    x: float,
    y: float,
    size: float,
) -> None:
    canvas_obj.drawImage(
        ImageReader(BytesIO(qr_png(_qr_text_from_url(qr_url)))),
        x,
        y,
        width=size,
        height=size,
        preserveAspectRatio=True,
        mask="auto",
    )


def _qr_text_from_url(qr_url: str) -> str:
    """Recover the encoded payload from a QR reference URL."""

    values = parse_qs(urlsplit(qr_url).query).get("data")
    return values[0] if values else qr_url

