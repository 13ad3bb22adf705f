import unittest

from reportlab.pdfbase.pdfmetrics import stringWidth

from label_templates.utils import ellipsize, shrink_fit


class LabelUtilsTests(unittest.TestCase):
    def test_shrink_fit_respects_bounds(self) -> None:
        size = shrink_fit("Hello", 1000, max_font=20, min_font=10, font_name="Helvetica")
        self.assertEqual(size, 20)
        size = shrink_fit("Hello", 1, max_font=20, min_font=10, font_name="Helvetica")
        self.assertGreaterEqual(size, 10)
        self.assertLessEqual(size, 20)

    def test_ellipsize_keeps_short_text(self) -> None:
        self.assertEqual(ellipsize("NB001", "Helvetica", 8, 1000), "NB001")

    def test_ellipsize_truncates_long_text(self) -> None:
        text = "Notebook Dell Inspiron 15 3000 com carregador"
        result = ellipsize(text, "Helvetica", 8, 60)
        self.assertTrue(result.endswith("..."))
        self.assertLessEqual(stringWidth(result, "Helvetica", 8), 60)

    def test_ellipsize_empty(self) -> None:
        self.assertEqual(ellipsize("", "Helvetica", 8, 60), "")
        self.assertEqual(ellipsize("Hello", "Helvetica", 8, 0), "")


if __name__ == "__main__":
    unittest.main()
