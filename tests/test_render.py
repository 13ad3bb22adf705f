import unittest

from label_templates import TemplateId, get_template, list_templates, resolve_template
from label_templates.label_types import LabelRecord
from label_templates.render import label_markup, render_label, render_label_html


def _record(template: TemplateId = TemplateId.STANDARD) -> LabelRecord:
    return LabelRecord(
        code="NB001",
        name="Notebook Dell Inspiron",
        category="Informática",
        location="11º Andar - Tecnologia - Sala de TI",
        qr_url="https://qr.example/?size=100x100&data=NB001%20-%20Notebook",
        date="05/03/2024",
        template=template,
    )


class TemplateRegistryTests(unittest.TestCase):
    def test_registered_sizes(self) -> None:
        sizes = {t.id.value: (t.width_mm, t.height_mm) for t in list_templates()}
        self.assertEqual(
            sizes,
            {
                "standard": (50, 30),
                "compact": (40, 20),
                "detailed": (70, 40),
                "qrOnly": (25, 25),
            },
        )

    def test_resolve_unknown_returns_none(self) -> None:
        self.assertIsNone(resolve_template("bogus"))
        self.assertIsNone(resolve_template(None))

    def test_get_template_falls_back_to_standard(self) -> None:
        self.assertIs(get_template("bogus").id, TemplateId.STANDARD)
        self.assertIs(get_template("qrOnly").id, TemplateId.QR_ONLY)


class RenderLabelTests(unittest.TestCase):
    def test_qr_only_has_only_qr(self) -> None:
        view = render_label(_record(), "qrOnly", False, True, True)
        self.assertEqual(view.kinds(), ["qr"])
        html = label_markup(view)
        self.assertNotIn("NB001<", html)
        self.assertNotIn("Notebook Dell Inspiron", html)
        self.assertIn("label-qr", html)

    def test_compact_ignores_flags(self) -> None:
        view = render_label(_record(), "compact", True, True, True)
        self.assertEqual(view.kinds(), ["code"])
        self.assertEqual(view.value("code"), "NB001")

    def test_standard_without_qr(self) -> None:
        view = render_label(_record(), "standard", False, True, True)
        self.assertEqual(view.kinds(), ["code", "name"])

    def test_standard_never_shows_location_or_date(self) -> None:
        view = render_label(_record(), "standard", True, True, True)
        self.assertEqual(view.kinds(), ["code", "name", "qr"])

    def test_detailed_all_fields_in_order(self) -> None:
        view = render_label(_record(), "detailed", True, True, True)
        self.assertEqual(view.kinds(), ["code", "name", "qr", "location", "date"])
        self.assertEqual(view.value("location"), "11º Andar - Tecnologia - Sala de TI")
        self.assertEqual(view.value("date"), "05/03/2024")

    def test_detailed_respects_flags(self) -> None:
        view = render_label(_record(), "detailed", False, False, True)
        self.assertEqual(view.kinds(), ["code", "name", "date"])

    def test_unknown_template_matches_standard(self) -> None:
        for flags in ((True, True, True), (False, False, False)):
            bogus = render_label(_record(), "bogus", *flags)
            standard = render_label(_record(), "standard", *flags)
            self.assertEqual(bogus, standard)
            self.assertEqual(label_markup(bogus), label_markup(standard))

    def test_markup_escapes_text(self) -> None:
        record = LabelRecord(
            code="<b>X</b>",
            name="A & B",
            category="",
            location="",
            qr_url="https://qr.example/?a=1&b=2",
            date="",
            template=TemplateId.STANDARD,
        )
        html = render_label_html(record, "standard", True, False, False)
        self.assertIn("&lt;b&gt;X&lt;/b&gt;", html)
        self.assertIn("A &amp; B", html)
        self.assertIn('src="https://qr.example/?a=1&amp;b=2"', html)
        self.assertIn('class="label label-standard"', html)


if __name__ == "__main__":
    unittest.main()
