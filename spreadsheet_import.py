"""Bulk import of inventory items from CSV and Excel spreadsheets."""

from __future__ import annotations

import csv
import io
import logging
import re
import unicodedata
from dataclasses import dataclass, field
from datetime import datetime, date
from typing import IO, Any, Dict, Iterator, List, Optional

from openpyxl import load_workbook

from inventory_store import InventoryStore

__all__ = [
    "CSV_HEADERS",
    "ImportFormatError",
    "ImportResult",
    "csv_template",
    "import_items",
    "normalize_header",
    "read_rows",
    "validate_row",
]

logger = logging.getLogger(__name__)

CSV_HEADERS = [
    "Nome",
    "Código",
    "Categoria",
    "Descrição",
    "Valor",
    "Status",
    "Andar",
    "Sala",
    "Fornecedor",
    "Garantia",
    "Número de Série",
]

CSV_EXAMPLE_ROW = [
    "Notebook Dell Inspiron",
    "NB001",
    "Informática",
    "Notebook para desenvolvimento",
    "3500.00",
    "Ativo",
    "11º Andar - Tecnologia",
    "Sala de TI",
    "Dell",
    "2026-12-31",
    "ABC123XYZ",
]

VALID_STATUSES = ("Ativo", "Inativo", "Manutenção", "Descartado")

# field name -> accepted (normalized) header names
FIELD_ALIASES: Dict[str, tuple[str, ...]] = {
    "name": ("nome", "name", "item"),
    "code": ("codigo", "code", "tag", "patrimonio"),
    "category": ("categoria", "category"),
    "description": ("descricao", "description", "observacoes", "notes"),
    "value": ("valor", "value", "preco", "preco_compra"),
    "status": ("status", "situacao"),
    "floor": ("andar", "floor"),
    "room": ("sala", "room"),
    "supplier": ("fornecedor", "supplier"),
    "warranty": ("garantia", "warranty", "fim_garantia"),
    "serial_number": ("numero_de_serie", "numero_serie", "serial_number", "serial"),
}

_HEADER_TO_FIELD = {
    alias: field_name
    for field_name, aliases in FIELD_ALIASES.items()
    for alias in aliases
}


class ImportFormatError(ValueError):
    """Raised when an uploaded file cannot be read as a spreadsheet."""


@dataclass
class ImportResult:
    created: int = 0
    errors: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def csv_template() -> str:
    """Return the import CSV header with one example row."""

    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    writer.writerow(CSV_EXAMPLE_ROW)
    return buffer.getvalue()


def normalize_header(header: Any) -> str:
    """Lower-case ``header``, strip accents and collapse separators."""

    text = unicodedata.normalize("NFD", str(header or "").strip().lower())
    text = "".join(ch for ch in text if not unicodedata.combining(ch))
    text = re.sub(r"[^a-z0-9]+", "_", text)
    return text.strip("_")


def _map_row(raw: Dict[Any, Any]) -> Dict[str, str]:
    mapped: Dict[str, str] = {}
    for header, value in raw.items():
        field_name = _HEADER_TO_FIELD.get(normalize_header(header))
        if not field_name or field_name in mapped:
            continue
        mapped[field_name] = _cell_text(value)
    return mapped


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value).strip()


def read_rows(filename: str, stream: IO[bytes]) -> Iterator[Dict[str, str]]:
    """Yield rows keyed by field name from a ``.csv`` or ``.xlsx`` upload."""

    lower = (filename or "").lower()
    if lower.endswith(".csv"):
        yield from _read_csv(stream)
    elif lower.endswith(".xlsx"):
        yield from _read_xlsx(stream)
    else:
        raise ImportFormatError(
            f"Unsupported file '{filename}'. Upload a .csv or .xlsx file."
        )


def _read_csv(stream: IO[bytes]) -> Iterator[Dict[str, str]]:
    try:
        content = stream.read().decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise ImportFormatError(f"CSV file is not valid UTF-8: {exc}") from exc
    reader = csv.DictReader(io.StringIO(content))
    for raw in reader:
        yield _map_row({k: v for k, v in raw.items() if k is not None})


def _read_xlsx(stream: IO[bytes]) -> Iterator[Dict[str, str]]:
    try:
        workbook = load_workbook(io.BytesIO(stream.read()), data_only=True)
    except Exception as exc:
        raise ImportFormatError(f"Unable to read Excel file: {exc}") from exc
    sheet = workbook.active
    rows = list(sheet.iter_rows(values_only=True))
    if not rows:
        return
    headers = list(rows[0])
    for row in rows[1:]:
        if row is None or all(cell in {None, ""} for cell in row):
            continue
        yield _map_row(dict(zip(headers, row)))


def _parse_value(text: str) -> Optional[float]:
    """Parse a pt-BR (``1.234,56``) or plain (``1234.56``) amount."""

    text = (text or "").strip()
    if not text:
        return None
    if "," in text and "." in text:
        if text.rfind(",") < text.rfind("."):
            raise ValueError(f"ambiguous separators in '{text}'")
        text = text.replace(".", "").replace(",", ".")
    else:
        text = text.replace(",", ".")
    return float(text)


def _is_iso_date(text: str) -> bool:
    try:
        datetime.strptime(text, "%Y-%m-%d")
    except ValueError:
        return False
    return True


def validate_row(row: Dict[str, str], row_number: int) -> List[str]:
    """Return the validation messages for one mapped row."""

    errors: List[str] = []
    if not row.get("name"):
        errors.append(f"Linha {row_number}: campo 'Nome' é obrigatório")
    if not row.get("code"):
        errors.append(f"Linha {row_number}: campo 'Código' é obrigatório")

    value = row.get("value")
    if value:
        try:
            _parse_value(value)
        except ValueError:
            errors.append(f"Linha {row_number}: 'Valor' deve ser um número válido")

    status = row.get("status")
    if status and status not in VALID_STATUSES:
        errors.append(
            f"Linha {row_number}: 'Status' deve ser um de: {', '.join(VALID_STATUSES)}"
        )

    warranty = row.get("warranty")
    if warranty and not _is_iso_date(warranty):
        errors.append(
            f"Linha {row_number}: 'Garantia' inválida (use o formato AAAA-MM-DD)"
        )
    return errors


def import_items(
    store: InventoryStore,
    filename: str,
    stream: IO[bytes],
) -> ImportResult:
    """Validate every row, then add all items or none of them.

    The store lock is held from validation through the last insert.
    """

    rows = [row for row in read_rows(filename, stream) if any(row.values())]
    with store.lock:
        return _import_rows(store, filename, rows)


def _import_rows(
    store: InventoryStore,
    filename: str,
    rows: List[Dict[str, str]],
) -> ImportResult:
    result = ImportResult()
    if not rows:
        result.errors.append("O arquivo não possui linhas de dados.")
        return result

    seen_codes: set[str] = set()
    for index, row in enumerate(rows):
        row_number = index + 2
        result.errors.extend(validate_row(row, row_number))
        code = row.get("code", "")
        key = code.casefold()
        if not code:
            continue
        if key in seen_codes:
            result.errors.append(
                f"Linha {row_number}: código '{code}' repetido no arquivo"
            )
        elif store.code_exists(code):
            result.errors.append(
                f"Linha {row_number}: código '{code}' já cadastrado"
            )
        seen_codes.add(key)

    if result.errors:
        logger.warning(
            "Rejected import of %s: %d error(s)", filename, len(result.errors)
        )
        return result

    for row in rows:
        floor_id = None
        room_id = None
        if row.get("floor"):
            floor_id = store.ensure_floor(row["floor"]).id
            if row.get("room"):
                room_id = store.ensure_room(floor_id, row["room"]).id
        store.add_item(
            code=row["code"],
            name=row["name"],
            category=row.get("category", ""),
            floor_id=floor_id,
            room_id=room_id,
            description=row.get("description", ""),
            value=_parse_value(row.get("value", "")),
            status=row.get("status") or "Ativo",
            supplier=row.get("supplier", ""),
            warranty=row.get("warranty", ""),
            serial_number=row.get("serial_number", ""),
        )
        result.created += 1

    logger.info("Imported %d item(s) from %s", result.created, filename)
    return result
