import re
import unittest

from label_templates import TemplateId
from label_templates.label_types import LabelRecord
from label_templates.printing import (
    DIRECT_PRINT,
    PAGINATED_EXPORT,
    compose,
    layout_profile,
    template_css,
)


def _record(code: str, template: TemplateId) -> LabelRecord:
    return LabelRecord(
        code=code,
        name=f"Item {code}",
        category="",
        location="Andar - Sala",
        qr_url=f"https://qr.example/?data={code}",
        date="05/03/2024",
        template=template,
    )


def _cell_templates(document: str) -> list[str]:
    return re.findall(r'<div class="label label-\w+" data-template="(\w+)">', document)


class ComposeTests(unittest.TestCase):
    def test_one_cell_per_record_in_order(self) -> None:
        records = [
            _record("A1", TemplateId.STANDARD),
            _record("B2", TemplateId.DETAILED),
            _record("C3", TemplateId.QR_ONLY),
        ]
        document = compose(records, "standard")
        self.assertEqual(_cell_templates(document), ["standard", "detailed", "qrOnly"])
        self.assertLess(document.index("A1"), document.index("B2"))

    def test_empty_batch_is_valid_document(self) -> None:
        document = compose([], "standard")
        self.assertTrue(document.startswith("<!DOCTYPE html>"))
        self.assertIn('<div class="labels-grid">', document)
        self.assertEqual(_cell_templates(document), [])

    def test_direct_print_uses_auto_fit_grid(self) -> None:
        document = compose([_record("A1", TemplateId.STANDARD)], "standard", DIRECT_PRINT)
        self.assertIn("repeat(auto-fit, minmax(50mm, max-content))", document)
        self.assertNotIn("@page", document)
        self.assertIn("window.print()", document)

    def test_paginated_export_uses_a4_four_columns(self) -> None:
        document = compose([_record("A1", TemplateId.COMPACT)], "compact", PAGINATED_EXPORT)
        self.assertIn("@page { size: A4; margin: 10mm; }", document)
        self.assertIn("repeat(4, 1fr)", document)
        self.assertIn('data-layout="export"', document)
        self.assertIn("window.print()", document)

    def test_include_flags_apply_to_cells(self) -> None:
        document = compose(
            [_record("A1", TemplateId.DETAILED)],
            "detailed",
            include_qr=False,
            include_location=False,
            include_date=False,
        )
        self.assertNotIn('class="label-qr"', document)
        self.assertNotIn('class="label-location"', document)
        self.assertNotIn('class="label-date"', document)

    def test_template_css_sizes(self) -> None:
        css = template_css()
        self.assertIn(".label-standard { width: 50mm; height: 30mm; }", css)
        self.assertIn(".label-compact { width: 40mm; height: 20mm; }", css)
        self.assertIn(".label-detailed { width: 70mm; height: 40mm; }", css)
        self.assertIn(".label-qrOnly { width: 25mm; height: 25mm; }", css)

    def test_layout_profile_lookup(self) -> None:
        self.assertIs(layout_profile("print"), DIRECT_PRINT)
        self.assertIs(layout_profile("export"), PAGINATED_EXPORT)
        with self.assertRaises(ValueError):
            layout_profile("fax")


if __name__ == "__main__":
    unittest.main()
