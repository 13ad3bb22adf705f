from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Floor:
    id: int
    name: str
    description: str = ""


@dataclass(frozen=True)
class Room:
    id: int
    name: str
    floor_id: int
    description: str = ""


@dataclass(frozen=True)
class InventoryItem:
    id: int
    code: str
    name: str
    category: str = ""
    floor_id: int | None = None
    room_id: int | None = None
    description: str = ""
    value: float | None = None
    status: str = "Ativo"
    supplier: str = ""
    warranty: str = ""
    serial_number: str = ""
    created_at: str = ""
