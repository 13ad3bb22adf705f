"""Build label records from inventory items."""

from __future__ import annotations

import os
from datetime import date
from typing import Callable, Mapping, Optional, Sequence

from domain_types import InventoryItem

from . import get_template
from .label_types import LabelRecord, LabelSettings
from .qr import PREVIEW_PAYLOAD, qr_payload, qr_reference

__all__ = [
    "LocationResolver",
    "build_label_records",
    "compose_location",
    "format_label_date",
    "item_to_label_record",
    "make_location_resolver",
    "preview_record",
]

DEFAULT_DATE_FORMAT = "%d/%m/%Y"

LocationResolver = Callable[[Optional[int], Optional[int]], str]


def format_label_date(day: date | None = None) -> str:
    """Format ``day`` (default: today) for printing on a label."""

    fmt = os.getenv("ASSET_LABELS_DATE_FORMAT", "") or DEFAULT_DATE_FORMAT
    return (day or date.today()).strftime(fmt)


def compose_location(floor_name: str | None, room_name: str | None) -> str:
    # The separator is kept even when one side is unknown.
    return f"{floor_name or ''} - {room_name or ''}"


def make_location_resolver(
    floors: Mapping[int, str],
    rooms: Mapping[int, str],
) -> LocationResolver:
    """Return a resolver that joins floor and room names by id."""

    def resolve(floor_id: Optional[int], room_id: Optional[int]) -> str:
        floor_name = floors.get(floor_id) if floor_id is not None else None
        room_name = rooms.get(room_id) if room_id is not None else None
        return compose_location(floor_name, room_name)

    return resolve


def item_to_label_record(
    item: InventoryItem,
    settings: LabelSettings,
    location_resolver: LocationResolver,
    label_date: str,
) -> LabelRecord:
    return LabelRecord(
        code=item.code,
        name=item.name,
        category=item.category,
        location=location_resolver(item.floor_id, item.room_id),
        qr_url=qr_reference(qr_payload(item.code, item.name)),
        date=label_date,
        template=get_template(settings.template).id,
    )


def build_label_records(
    items: Sequence[InventoryItem],
    settings: LabelSettings,
    location_resolver: LocationResolver,
    today: date | None = None,
) -> list[LabelRecord]:
    """Return one label record per item, in selection order."""

    label_date = format_label_date(today)
    return [
        item_to_label_record(item, settings, location_resolver, label_date)
        for item in items
    ]


def preview_record(settings: LabelSettings, today: date | None = None) -> LabelRecord:
    """Return the sample record shown when nothing is selected."""

    return LabelRecord(
        code="PREVIEW",
        name="Etiqueta de exemplo",
        category="Exemplo",
        location=compose_location("Andar", "Sala"),
        qr_url=qr_reference(PREVIEW_PAYLOAD),
        date=format_label_date(today),
        template=get_template(settings.template).id,
    )
