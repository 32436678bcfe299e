from __future__ import annotations

import unittest
from typing import get_args

from aesplot import (
    PlotDataError,
    ScaleSpec,
    View,
    auto,
    bar,
    cross,
    distribution,
    facet,
    hband,
    histogram,
    hline,
    infer_defaults,
    layer,
    layers,
    linear,
    pairs,
    point,
    set_coord,
    set_scale,
    smooth,
    stack,
    stacked_bar,
    text_label,
    views,
    vline,
    when_diagonal,
    when_off_diagonal,
    where,
    where_not,
)
from aesplot.algebra import diagonal
from aesplot.coords import COORD_RULES
from aesplot.marks import ANNOTATION_DRAWERS, MARK_DRAWERS
from aesplot.stats import STAT_HANDLERS
from aesplot.view import CoordType, Mark, Stat


DATA = {
    "a": [1.0, 2.0, 3.0, 4.0],
    "b": [4.0, 3.0, 1.0, 2.0],
    "g": ["u", "v", "u", "v"],
}


class ViewCollectionTests(unittest.TestCase):
    def test_cross_orders_y_outer_x_inner(self) -> None:
        self.assertEqual(cross(["a", "b"], ["c", "d"]), [("a", "c"), ("b", "c"), ("a", "d"), ("b", "d")])

    def test_pairs_are_unordered_combinations(self) -> None:
        self.assertEqual(pairs(["a", "b", "g"]), [("a", "b"), ("a", "g"), ("b", "g")])

    def test_views_share_one_dataset(self) -> None:
        vs = views(DATA, [("a", "b"), ("b", "a")])
        self.assertEqual([(v.x, v.y) for v in vs], [("a", "b"), ("b", "a")])
        self.assertIs(vs[0].data, vs[1].data)
        self.assertIsNone(vs[0].mark)

    def test_distribution_puts_columns_on_the_diagonal(self) -> None:
        vs = distribution(DATA, "a", "b")
        self.assertTrue(all(diagonal(v) for v in vs))

    def test_stack_concatenates(self) -> None:
        first = views(DATA, [("a", "b")])
        second = views(DATA, [("b", "a")])
        self.assertEqual(stack(first, second), first + second)


class LayerSpecTests(unittest.TestCase):
    def test_constructors_set_mark_and_stat(self) -> None:
        self.assertEqual(point(), {"mark": "point", "stat": "identity"})
        self.assertEqual(linear()["stat"], "regress")
        self.assertEqual(smooth(bandwidth=0.5)["bandwidth"], 0.5)
        self.assertEqual(histogram(bins=5), {"mark": "bar", "stat": "bin", "bins": 5})
        self.assertEqual(bar()["stat"], "count")
        self.assertEqual(stacked_bar()["position"], "stack")
        self.assertEqual(text_label("g")["text"], "g")
        self.assertEqual(hband(1.0, 2.0), {"mark": "band-h", "y1": 1.0, "y2": 2.0})

    def test_unknown_option_is_rejected(self) -> None:
        with self.assertRaises(PlotDataError):
            point(colour="g")

    def test_layer_merges_specs_then_overrides(self) -> None:
        vs = layer(views(DATA, [("a", "b")]), point(), {"color": "g"}, mark="line")
        (view,) = vs
        self.assertEqual((view.mark, view.stat, view.color), ("line", "identity", "g"))

    def test_layers_copies_base_per_spec_and_appends_annotations(self) -> None:
        base = views(DATA, [("a", "b"), ("b", "a")])
        out = layers(base, point(), hline(2.0), linear(), vline(1.0))
        self.assertEqual([v.mark for v in out], ["point", "point", "line", "line", "rule-h", "rule-v"])
        rule = out[4]
        self.assertIsNone(rule.data)
        self.assertEqual(rule.value, 2.0)
        self.assertTrue(rule.is_annotation)


class FacetTests(unittest.TestCase):
    def test_facet_splits_rows_by_sorted_value(self) -> None:
        out = facet(layers(views(DATA, [("a", "b")]), point()), "g")
        self.assertEqual([v.facet_col for v in out], ["u", "v"])
        self.assertEqual(out[0].data.column("a"), [1.0, 3.0])
        self.assertEqual(out[1].data.column("a"), [2.0, 4.0])

    def test_facet_keeps_annotations(self) -> None:
        out = facet(layers(views(DATA, [("a", "b")]), point(), hline(0.0)), "g")
        self.assertEqual(len(out), 3)
        self.assertIsNone(out[-1].facet_col)


class DefaultsAndSelectionTests(unittest.TestCase):
    def test_infer_defaults(self) -> None:
        diag, off = views(DATA, [("a", "a"), ("a", "b")])
        self.assertEqual((infer_defaults(diag).mark, infer_defaults(diag).stat), ("bar", "bin"))
        self.assertEqual((infer_defaults(off).mark, infer_defaults(off).stat), ("point", "identity"))
        explicit = off.merge({"stat": "smooth"})
        self.assertEqual(infer_defaults(explicit).stat, "smooth")
        self.assertEqual(infer_defaults(explicit).mark, "point")

    def test_auto_leaves_annotations_alone(self) -> None:
        rule = View(mark="rule-h", value=1.0)
        self.assertIs(auto([rule])[0], rule)

    def test_where_and_diagonal_helpers(self) -> None:
        grid = views(DATA, cross(["a", "b"], ["a", "b"]))
        self.assertEqual(len(where(grid, diagonal)), 2)
        self.assertEqual(len(where_not(grid, diagonal)), 2)
        marked = when_off_diagonal(when_diagonal(grid, histogram()), smooth())
        self.assertEqual([v.stat for v in marked], ["bin", "smooth", "smooth", "bin"])

    def test_set_scale_and_coord(self) -> None:
        out = set_scale(views(DATA, [("a", "b")]), "y", "log", (1, 10))
        self.assertEqual(out[0].y_scale, ScaleSpec(type="log", domain=(1, 10)))
        with self.assertRaises(PlotDataError):
            set_scale(out, "color")
        self.assertEqual(set_coord(out, "flip")[0].coord, "flip")
        with self.assertRaises(PlotDataError):
            set_coord(out, "globe")


class ViewValidationTests(unittest.TestCase):
    def test_tags_are_validated(self) -> None:
        with self.assertRaises(PlotDataError):
            View(mark="pie")
        with self.assertRaises(PlotDataError):
            View(stat="median")
        with self.assertRaises(PlotDataError):
            View(bins=0)
        with self.assertRaises(PlotDataError):
            View(bandwidth=1.5)
        with self.assertRaises(PlotDataError):
            View().merge({"colour": "g"})

    def test_bin_rules_are_checked_up_front(self) -> None:
        with self.assertRaisesRegex(PlotDataError, "unknown bin rule"):
            View(bins="bogus")
        self.assertEqual(View(bins="fd").bins, "fd")
        self.assertEqual(View(bins=7).bins, 7)

    def test_scale_specs_are_coerced(self) -> None:
        view = View(x_scale="log", y_scale={"domain": [0, 5]})
        self.assertEqual(view.x_scale, ScaleSpec(type="log"))
        self.assertEqual(view.y_scale.domain, (0, 5))
        self.assertEqual(View().y_scale_spec, ScaleSpec())

    def test_every_tag_has_an_implementation(self) -> None:
        self.assertEqual(set(MARK_DRAWERS) | set(ANNOTATION_DRAWERS), set(get_args(Mark)))
        self.assertEqual(set(STAT_HANDLERS), set(get_args(Stat)))
        self.assertEqual(set(COORD_RULES), set(get_args(CoordType)))


if __name__ == "__main__":
    unittest.main()
