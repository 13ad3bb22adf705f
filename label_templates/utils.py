"""Shared helpers for fitting text into label slots."""

from __future__ import annotations

from reportlab.pdfbase.pdfmetrics import stringWidth


def shrink_fit(
    text: str,
    max_width_pt: float,
    max_font: float,
    min_font: float,
    font_name: str,
    step: float = 0.5,
) -> float:
    """Return the largest font size that fits within ``max_width_pt``."""

    size = max_font
    step = max(step, 0.25)
    while (
        size >= min_font
        and stringWidth(text, font_name, size) > max_width_pt
    ):
        size -= step
    return max(size, min_font)


def ellipsize(
    text: str,
    font_name: str,
    font_size: float,
    max_width_pt: float,
) -> str:
    """Cut ``text`` to a single line of ``max_width_pt``, ending in an ellipsis."""

    text = (text or "").strip()
    if not text or max_width_pt <= 0:
        return ""
    if stringWidth(text, font_name, font_size) <= max_width_pt:
        return text

    suffix = "..."
    cut = text
    while cut:
        cut = cut[:-1].rstrip()
        candidate = cut + suffix
        if stringWidth(candidate, font_name, font_size) <= max_width_pt:
            return candidate
    return suffix if stringWidth(suffix, font_name, font_size) <= max_width_pt else ""
