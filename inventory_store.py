"""In-memory inventory repository with floors, rooms and items."""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import asdict, dataclass, field, replace
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable

from domain_types import Floor, InventoryItem, Room

logger = logging.getLogger(__name__)


class InventoryError(RuntimeError):
    """Raised when an inventory operation cannot be applied."""


class DuplicateCodeError(InventoryError):
    """Raised when an item code is already taken (case-insensitive)."""


class ItemNotFoundError(InventoryError):
    """Raised when an item id does not exist."""


@dataclass
class InventoryStore:
    """Inventory holder used by the label generator."""

    floors: dict[int, Floor] = field(default_factory=dict)
    rooms: dict[int, Room] = field(default_factory=dict)
    items: dict[int, InventoryItem] = field(default_factory=dict)
    lock: threading.RLock = field(
        default_factory=threading.RLock, repr=False, compare=False)

    @classmethod
    def from_json_file(cls, path: str | Path) -> "InventoryStore":
        """Load floors, rooms and items from a JSON seed file."""

        try:
            payload = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise InventoryError(
                f"Unable to read inventory file '{path}': {exc}"
            ) from exc
        try:
            store = cls.from_payload(payload)
        except (TypeError, ValueError, AttributeError) as exc:
            raise InventoryError(
                f"Invalid inventory file '{path}': {exc}"
            ) from exc
        logger.info(
            "Loaded %d items, %d floors, %d rooms from %s",
            len(store.items),
            len(store.floors),
            len(store.rooms),
            path,
        )
        return store

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "InventoryStore":
        store = cls()
        for raw in payload.get("floors") or []:
            store.add_floor(
                raw.get("name") or "",
                description=raw.get("description") or "",
                floor_id=_as_int(raw.get("id")),
            )
        for raw in payload.get("rooms") or []:
            store.add_room(
                _as_int(raw.get("floor_id")) or 0,
                raw.get("name") or "",
                description=raw.get("description") or "",
                room_id=_as_int(raw.get("id")),
            )
        for raw in payload.get("items") or []:
            store.add_item(
                code=str(raw.get("code") or ""),
                name=str(raw.get("name") or ""),
                category=raw.get("category") or "",
                floor_id=_as_int(raw.get("floor_id")),
                room_id=_as_int(raw.get("room_id")),
                description=raw.get("description") or "",
                value=_as_float(raw.get("value")),
                status=raw.get("status") or "Ativo",
                supplier=raw.get("supplier") or "",
                warranty=raw.get("warranty") or "",
                serial_number=raw.get("serial_number") or "",
                created_at=raw.get("created_at") or "",
                item_id=_as_int(raw.get("id")),
            )
        return store

    def to_payload(self) -> dict[str, list[dict[str, Any]]]:
        with self.lock:
            return {
                "floors": [asdict(floor) for floor in self.floors.values()],
                "rooms": [asdict(room) for room in self.rooms.values()],
                "items": [asdict(item) for item in self.items.values()],
            }

    def to_json_file(self, path: str | Path) -> None:
        Path(path).write_text(
            json.dumps(self.to_payload(), ensure_ascii=False, indent=2),
            encoding="utf-8",
        )

    # Floors and rooms

    def add_floor(
        self,
        name: str,
        description: str = "",
        floor_id: int | None = None,
    ) -> Floor:
        name = (name or "").strip()
        if not name:
            raise InventoryError("Floor name is required.")
        with self.lock:
            new_id = floor_id if floor_id is not None else _next_id(self.floors)
            floor = Floor(id=new_id, name=name, description=description.strip())
            self.floors[new_id] = floor
        return floor

    def add_room(
        self,
        floor_id: int,
        name: str,
        description: str = "",
        room_id: int | None = None,
    ) -> Room:
        name = (name or "").strip()
        if not name:
            raise InventoryError("Room name is required.")
        with self.lock:
            if floor_id not in self.floors:
                raise InventoryError(f"Floor {floor_id} does not exist.")
            new_id = room_id if room_id is not None else _next_id(self.rooms)
            room = Room(
                id=new_id,
                name=name,
                floor_id=floor_id,
                description=description.strip(),
            )
            self.rooms[new_id] = room
        return room

    def ensure_floor(self, name: str) -> Floor:
        """Return the floor called ``name``, creating it when missing."""

        key = (name or "").strip().casefold()
        with self.lock:
            for floor in self.floors.values():
                if floor.name.casefold() == key:
                    return floor
            return self.add_floor(name)

    def ensure_room(self, floor_id: int, name: str) -> Room:
        """Return the room ``name`` on ``floor_id``, creating it when missing."""

        key = (name or "").strip().casefold()
        with self.lock:
            for room in self.rooms.values():
                if room.floor_id == floor_id and room.name.casefold() == key:
                    return room
            return self.add_room(floor_id, name)

    def list_floors(self) -> list[Floor]:
        with self.lock:
            return list(self.floors.values())

    def rooms_for_floor(self, floor_id: int) -> list[Room]:
        with self.lock:
            return [room for room in self.rooms.values() if room.floor_id == floor_id]

    def floor_name(self, floor_id: int | None) -> str:
        floor = self.floors.get(floor_id) if floor_id is not None else None
        return floor.name if floor else ""

    def room_name(self, room_id: int | None) -> str:
        room = self.rooms.get(room_id) if room_id is not None else None
        return room.name if room else ""

    def location_name(self, floor_id: int | None, room_id: int | None) -> str:
        """Return ``"<floor> - <room>"``; unknown parts are left empty."""

        return f"{self.floor_name(floor_id)} - {self.room_name(room_id)}"

    # Items

    def add_item(
        self,
        code: str,
        name: str,
        *,
        item_id: int | None = None,
        created_at: str = "",
        **fields: Any,
    ) -> InventoryItem:
        code = (code or "").strip()
        name = (name or "").strip()
        if not code or not name:
            raise InventoryError("Item code and name are required.")
        with self.lock:
            if self.code_exists(code):
                raise DuplicateCodeError(f"Code '{code}' already exists.")
            new_id = item_id if item_id is not None else _next_id(self.items)
            item = InventoryItem(
                id=new_id,
                code=code,
                name=name,
                created_at=created_at or datetime.now().isoformat(timespec="seconds"),
                **fields,
            )
            self.items[new_id] = item
        logger.debug("Added item %s (%s)", item.code, item.id)
        return item

    def update_item(self, item_id: int, **changes: Any) -> InventoryItem:
        with self.lock:
            current = self.get_item(item_id)
            if "code" in changes:
                code = (changes["code"] or "").strip()
                if not code:
                    raise InventoryError("Item code is required.")
                if self.code_exists(code, exclude_id=item_id):
                    raise DuplicateCodeError(f"Code '{code}' already exists.")
                changes["code"] = code
            updated = replace(current, **changes)
            self.items[item_id] = updated
        return updated

    def delete_item(self, item_id: int) -> None:
        with self.lock:
            if self.items.pop(item_id, None) is None:
                raise ItemNotFoundError(f"Item {item_id} does not exist.")

    def get_item(self, item_id: int) -> InventoryItem:
        item = self.items.get(item_id)
        if item is None:
            raise ItemNotFoundError(f"Item {item_id} does not exist.")
        return item

    def list_items(self) -> list[InventoryItem]:
        with self.lock:
            return list(self.items.values())

    def items_by_ids(self, item_ids: Iterable[int]) -> list[InventoryItem]:
        """Return items in the order of ``item_ids``; unknown ids are dropped."""

        with self.lock:
            return [self.items[item_id] for item_id in item_ids if item_id in self.items]

    def code_exists(self, code: str, exclude_id: int | None = None) -> bool:
        key = (code or "").strip().casefold()
        with self.lock:
            return any(
                item.code.casefold() == key
                for item in self.items.values()
                if item.id != exclude_id
            )

    def categories(self) -> list[str]:
        with self.lock:
            return sorted(
                {item.category for item in self.items.values() if item.category},
                key=str.casefold,
            )


def _next_id(existing: dict[int, Any]) -> int:
    return max(existing, default=0) + 1


def _as_int(value: Any) -> int | None:
    if value is None or value == "":
        return None
    return int(value)


def _as_float(value: Any) -> float | None:
    if value is None or value == "":
        return None
    return float(value)
