"""Turn label records into the fields (and HTML) shown on a label."""

from __future__ import annotations

from dataclasses import dataclass

from markupsafe import Markup

from . import get_template
from .base import LabelTemplate, TemplateId
from .label_types import LabelRecord, LabelSettings

__all__ = [
    "LabelField",
    "LabelView",
    "label_markup",
    "render_label",
    "render_label_html",
    "render_with_settings",
]

CODE = "code"
NAME = "name"
QR = "qr"
LOCATION = "location"
DATE = "date"


@dataclass(frozen=True)
class LabelField:
    kind: str
    value: str


@dataclass(frozen=True)
class LabelView:
    """Fields of one label cell, in display order."""

    template: LabelTemplate
    fields: tuple[LabelField, ...]

    def kinds(self) -> list[str]:
        return [field.kind for field in self.fields]

    def value(self, kind: str) -> str | None:
        for field in self.fields:
            if field.kind == kind:
                return field.value
        return None


def render_label(
    record: LabelRecord,
    template_id: TemplateId | str,
    include_qr: bool,
    include_location: bool,
    include_date: bool,
) -> LabelView:
    """Select the visible fields of ``record`` for ``template_id``.

    Unknown template ids render like ``standard``.
    """

    template = get_template(template_id)
    fields: list[LabelField] = []

    if template.id is TemplateId.QR_ONLY:
        fields.append(LabelField(QR, record.qr_url))
    elif template.id is TemplateId.COMPACT:
        fields.append(LabelField(CODE, record.code))
    elif template.id is TemplateId.DETAILED:
        fields.append(LabelField(CODE, record.code))
        fields.append(LabelField(NAME, record.name))
        if include_qr:
            fields.append(LabelField(QR, record.qr_url))
        if include_location:
            fields.append(LabelField(LOCATION, record.location))
        if include_date:
            fields.append(LabelField(DATE, record.date))
    else:
        fields.append(LabelField(CODE, record.code))
        fields.append(LabelField(NAME, record.name))
        if include_qr:
            fields.append(LabelField(QR, record.qr_url))

    return LabelView(template=template, fields=tuple(fields))


def render_with_settings(record: LabelRecord, settings: LabelSettings) -> LabelView:
    return render_label(
        record,
        settings.template,
        settings.include_qr,
        settings.include_location,
        settings.include_date,
    )


_FIELD_MARKUP = {
    CODE: Markup('<div class="label-code">{}</div>'),
    NAME: Markup('<div class="label-name" title="{0}">{0}</div>'),
    QR: Markup('<img class="label-qr" src="{}" alt="QR Code">'),
    LOCATION: Markup('<div class="label-location">{}</div>'),
    DATE: Markup('<div class="label-date">{}</div>'),
}


def label_markup(view: LabelView) -> Markup:
    """Return the HTML cell for ``view``; text values are escaped."""

    inner = Markup("").join(
        _FIELD_MARKUP[field.kind].format(field.value) for field in view.fields
    )
    return Markup(
        '<div class="label {css}" data-template="{template}">{inner}</div>'
    ).format(
        css=view.template.css_class,
        template=view.template.id.value,
        inner=inner,
    )


def render_label_html(
    record: LabelRecord,
    template_id: TemplateId | str,
    include_qr: bool,
    include_location: bool,
    include_date: bool,
) -> Markup:
    view = render_label(record, template_id, include_qr, include_location, include_date)
    return label_markup(view)
