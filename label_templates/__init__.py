"""Template registry for asset labels."""

from __future__ import annotations

import logging
from typing import Iterable

from .base import LabelTemplate, TemplateId

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE_ID = TemplateId.STANDARD

_TEMPLATES: dict[TemplateId, LabelTemplate] = {
    template.id: template
    for template in (
        LabelTemplate(
            id=TemplateId.STANDARD,
            name="Padrão",
            width_mm=50,
            height_mm=30,
            description="Código, nome e QR code",
        ),
        LabelTemplate(
            id=TemplateId.COMPACT,
            name="Compacta",
            width_mm=40,
            height_mm=20,
            description="Apenas o código",
        ),
        LabelTemplate(
            id=TemplateId.DETAILED,
            name="Detalhada",
            width_mm=70,
            height_mm=40,
            description="Código, nome, QR code, localização e data",
        ),
        LabelTemplate(
            id=TemplateId.QR_ONLY,
            name="Somente QR",
            width_mm=25,
            height_mm=25,
            description="Apenas o QR code",
        ),
    )
}


def _to_template_id(template_id: TemplateId | str | None) -> TemplateId | None:
    if isinstance(template_id, TemplateId):
        return template_id
    try:
        return TemplateId(template_id)
    except ValueError:
        return None


def resolve_template(template_id: TemplateId | str | None) -> LabelTemplate | None:
    """Return the template registered under ``template_id`` or ``None``."""

    key = _to_template_id(template_id)
    if key is None:
        return None
    return _TEMPLATES.get(key)


def get_template(template_id: TemplateId | str | None) -> LabelTemplate:
    """Return the template for ``template_id``, defaulting to ``standard``."""

    template = resolve_template(template_id)
    if template is None:
        logger.debug(
            "Unknown label template %r, using %s",
            template_id,
            DEFAULT_TEMPLATE_ID.value,
        )
        return _TEMPLATES[DEFAULT_TEMPLATE_ID]
    return template


def list_templates() -> list[LabelTemplate]:
    """Return the registered templates in display order."""

    return list(_TEMPLATES.values())


def template_ids() -> Iterable[str]:
    return [template.id.value for template in _TEMPLATES.values()]


__all__ = [
    "DEFAULT_TEMPLATE_ID",
    "LabelTemplate",
    "TemplateId",
    "get_template",
    "list_templates",
    "resolve_template",
    "template_ids",
]
