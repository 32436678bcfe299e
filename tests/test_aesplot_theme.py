from __future__ import annotations

import unittest

from aesplot import DEFAULT_THEME, Theme, validate_theme
from aesplot.theme import GGPLOT_PALETTE


class ThemeTests(unittest.TestCase):
    def test_defaults_validate_unchanged(self) -> None:
        self.assertEqual(validate_theme(), DEFAULT_THEME)
        self.assertEqual(validate_theme({}), Theme())

    def test_overrides_merge_onto_base(self) -> None:
        theme = validate_theme({"background": "#fff", "font_size": 10})
        self.assertEqual(theme.background, "#fff")
        self.assertEqual(theme.font_size, 10.0)
        self.assertEqual(theme.grid, DEFAULT_THEME.grid)

        darker = validate_theme({"grid": "#000000"}, base=theme)
        self.assertEqual(darker.background, "#fff")

    def test_invalid_values_are_rejected(self) -> None:
        cases = [
            ({"backdrop": "#fff"}, "Unknown theme key"),
            ({"text_color": "black"}, "hex color"),
            ({"palette": []}, "palette"),
            ({"palette": ["#fff", "red"]}, "hex color"),
            ({"point_radius": 0}, "positive number"),
            ({"line_width": True}, "positive number"),
            ({"mark_opacity": 1.5}, "within"),
            ({"font_family": "  "}, "font_family"),
        ]
        for overrides, message in cases:
            with self.subTest(overrides=overrides):
                with self.assertRaisesRegex(ValueError, message):
                    validate_theme(overrides)

    def test_color_for_cycles_the_palette(self) -> None:
        categories = tuple(range(10))
        self.assertEqual(DEFAULT_THEME.color_for(0, categories), GGPLOT_PALETTE[0])
        self.assertEqual(DEFAULT_THEME.color_for(8, categories), GGPLOT_PALETTE[0])
        self.assertEqual(DEFAULT_THEME.color_for(None, categories), DEFAULT_THEME.default_color)
        self.assertEqual(DEFAULT_THEME.color_for("z", categories), DEFAULT_THEME.default_color)


if __name__ == "__main__":
    unittest.main()
