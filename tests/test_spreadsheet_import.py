import csv
import io
import threading
import unittest

from openpyxl import Workbook

from inventory_store import InventoryStore
from spreadsheet_import import (
    CSV_HEADERS,
    ImportFormatError,
    csv_template,
    import_items,
    normalize_header,
    read_rows,
    validate_row,
)


def _csv_bytes(rows: list[list[str]], header: list[str] | None = None) -> io.BytesIO:
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(header or CSV_HEADERS)
    writer.writerows(rows)
    return io.BytesIO(buffer.getvalue().encode("utf-8-sig"))


class CsvTemplateTests(unittest.TestCase):
    def test_header_and_example_row(self) -> None:
        lines = csv_template().splitlines()
        self.assertEqual(
            lines[0],
            "Nome,Código,Categoria,Descrição,Valor,Status,Andar,Sala,"
            "Fornecedor,Garantia,Número de Série",
        )
        self.assertEqual(len(lines), 2)

    def test_template_imports_cleanly(self) -> None:
        store = InventoryStore()
        stream = io.BytesIO(csv_template().encode("utf-8"))
        result = import_items(store, "modelo.csv", stream)
        self.assertTrue(result.ok, result.errors)
        self.assertEqual(result.created, 1)
        item = store.list_items()[0]
        self.assertEqual(item.code, "NB001")
        self.assertEqual(item.value, 3500.0)
        self.assertEqual(
            store.location_name(item.floor_id, item.room_id),
            "11º Andar - Tecnologia - Sala de TI",
        )


class NormalizationTests(unittest.TestCase):
    def test_normalize_header(self) -> None:
        self.assertEqual(normalize_header("Número de Série"), "numero_de_serie")
        self.assertEqual(normalize_header(" Código "), "codigo")
        self.assertEqual(normalize_header(None), "")

    def test_aliases_are_accepted(self) -> None:
        stream = _csv_bytes([["Mesa", "M1", "120,50"]], header=["name", "code", "Preço"])
        rows = list(read_rows("itens.csv", stream))
        self.assertEqual(rows, [{"name": "Mesa", "code": "M1", "value": "120,50"}])

    def test_unsupported_extension(self) -> None:
        with self.assertRaises(ImportFormatError):
            list(read_rows("itens.txt", io.BytesIO(b"")))


class ValidationTests(unittest.TestCase):
    def test_required_fields(self) -> None:
        errors = validate_row({"name": "", "code": ""}, 2)
        self.assertEqual(len(errors), 2)
        self.assertTrue(all(message.startswith("Linha 2:") for message in errors))

    def test_invalid_value_status_and_warranty(self) -> None:
        errors = validate_row(
            {
                "name": "Item",
                "code": "X1",
                "value": "abc",
                "status": "Perdido",
                "warranty": "31/12/2026",
            },
            3,
        )
        self.assertEqual(len(errors), 3)

    def test_comma_decimal_value_is_valid(self) -> None:
        self.assertEqual(validate_row({"name": "Item", "code": "X1", "value": "1.234,56"}, 2), [])

    def test_mixed_separators_must_end_with_comma(self) -> None:
        errors = validate_row({"name": "Item", "code": "X1", "value": "1,234.56"}, 4)
        self.assertEqual(errors, ["Linha 4: 'Valor' deve ser um número válido"])


class ImportItemsTests(unittest.TestCase):
    def test_duplicate_codes_reject_whole_file(self) -> None:
        store = InventoryStore()
        store.add_item(code="NB001", name="Existente")
        stream = _csv_bytes(
            [
                ["Novo", "NB002", "", "", "", "", "", "", "", "", ""],
                ["Repetido", "nb002", "", "", "", "", "", "", "", "", ""],
                ["Existente", "nb001", "", "", "", "", "", "", "", "", ""],
            ]
        )
        result = import_items(store, "itens.csv", stream)
        self.assertFalse(result.ok)
        self.assertEqual(result.created, 0)
        self.assertEqual(len(result.errors), 2)
        self.assertEqual(len(store.list_items()), 1)

    def test_empty_file(self) -> None:
        result = import_items(InventoryStore(), "itens.csv", _csv_bytes([]))
        self.assertFalse(result.ok)

    def test_xlsx_import(self) -> None:
        workbook = Workbook()
        sheet = workbook.active
        sheet.append(CSV_HEADERS)
        sheet.append(
            ["Impressora", "IMP01", "Periféricos", "", 1200, "Ativo",
             "Térreo", "Recepção", "HP", "2027-01-31", "SN1"]
        )
        sheet.append([None] * len(CSV_HEADERS))
        buffer = io.BytesIO()
        workbook.save(buffer)
        buffer.seek(0)

        store = InventoryStore()
        result = import_items(store, "itens.XLSX", buffer)
        self.assertTrue(result.ok, result.errors)
        item = store.list_items()[0]
        self.assertEqual(item.code, "IMP01")
        self.assertEqual(item.value, 1200.0)
        self.assertEqual(store.location_name(item.floor_id, item.room_id), "Térreo - Recepção")

    def test_import_waits_for_store_lock(self) -> None:
        store = InventoryStore()
        stream = _csv_bytes([["Novo", "NB010", "", "", "", "", "", "", "", "", ""]])
        results = []

        with store.lock:
            worker = threading.Thread(
                target=lambda: results.append(import_items(store, "itens.csv", stream))
            )
            worker.start()
            worker.join(timeout=0.2)
            self.assertTrue(worker.is_alive())
            self.assertEqual(store.list_items(), [])

        worker.join(timeout=5)
        self.assertFalse(worker.is_alive())
        self.assertEqual(results[0].created, 1)

    def test_overlapping_import_is_rejected_whole(self) -> None:
        store = InventoryStore()
        first = import_items(
            store,
            "a.csv",
            _csv_bytes(
                [
                    ["Mesa", "MES01", "", "", "", "", "", "", "", "", ""],
                    ["Cadeira", "CAD01", "", "", "", "", "", "", "", "", ""],
                ]
            ),
        )
        second = import_items(
            store,
            "b.csv",
            _csv_bytes(
                [
                    ["Armário", "ARM01", "", "", "", "", "", "", "", "", ""],
                    ["Cadeira", "cad01", "", "", "", "", "", "", "", "", ""],
                ]
            ),
        )
        self.assertEqual(first.created, 2)
        self.assertFalse(second.ok)
        self.assertEqual(second.created, 0)
        self.assertEqual(
            sorted(item.code for item in store.list_items()), ["CAD01", "MES01"]
        )


if __name__ == "__main__":
    unittest.main()
