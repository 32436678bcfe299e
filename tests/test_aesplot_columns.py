from __future__ import annotations

import importlib.util
import math
import unittest

import numpy as np
import pandas as pd

from aesplot import Dataset, PlotDataError, as_dataset
from aesplot.adapters import is_missing, is_number, sort_labels


class DatasetAdapterTests(unittest.TestCase):
    def test_mapping_of_sequences_and_arrays(self) -> None:
        ds = as_dataset(
            {
                "a": [1, 2, 3],
                "b": np.asarray([0.5, 1.5, 2.5]),
                "d": pd.Series(["x", "y", "z"]),
            }
        )
        self.assertEqual(ds.row_count(), 3)
        self.assertEqual(ds.columns, ("a", "b", "d"))
        self.assertEqual(ds.column("a"), [1, 2, 3])
        self.assertEqual(ds.column("b"), [0.5, 1.5, 2.5])
        self.assertIsInstance(ds.column("a")[0], int)

    @unittest.skipUnless(importlib.util.find_spec("torch") is not None, "torch not installed")
    def test_tensor_columns(self) -> None:
        import torch

        ds = as_dataset({"c": torch.tensor([7.0, 8.0, 9.0])})
        self.assertEqual(ds.column("c"), [7.0, 8.0, 9.0])
        with self.assertRaisesRegex(PlotDataError, "1-D"):
            as_dataset({"c": torch.zeros((2, 2))})

    def test_dataframe_and_dataset_pass_through(self) -> None:
        frame = pd.DataFrame({"x": [1.0, 2.0]})
        ds = as_dataset(frame)
        self.assertIs(ds.frame, frame)
        self.assertIs(as_dataset(ds), ds)

    def test_mismatched_lengths_rejected(self) -> None:
        with self.assertRaisesRegex(PlotDataError, "mismatched"):
            as_dataset({"a": [1, 2], "b": [1, 2, 3]})

    def test_two_dimensional_column_rejected(self) -> None:
        with self.assertRaisesRegex(PlotDataError, "1-D"):
            as_dataset({"a": np.zeros((2, 2))})

    def test_unsupported_input_rejected(self) -> None:
        with self.assertRaises(PlotDataError):
            as_dataset(42)
        with self.assertRaises(PlotDataError):
            as_dataset({"a": "abc"})

    def test_missing_column_is_reported(self) -> None:
        ds = as_dataset({"a": [1]})
        with self.assertRaisesRegex(PlotDataError, "column not found"):
            ds.column("nope")

    def test_distinct_preserves_first_seen_or_sorts(self) -> None:
        ds = as_dataset({"k": ["b", "a", None, "b", "c"]})
        self.assertEqual(ds.distinct("k"), ["b", "a", "c"])
        self.assertEqual(ds.distinct("k", sort=True), ["a", "b", "c"])

    def test_filter_by_mask_and_predicate(self) -> None:
        ds = as_dataset({"x": [1, 2, 3, 4], "g": ["a", "b", "a", "b"]})
        by_mask = ds.filter([True, False, True, False])
        self.assertEqual(by_mask.column("x"), [1, 3])
        by_row = ds.filter(lambda row: row["g"] == "b")
        self.assertEqual(by_row.column("x"), [2, 4])
        with self.assertRaisesRegex(PlotDataError, "mask length"):
            ds.filter([True])

    def test_value_helpers(self) -> None:
        self.assertTrue(is_missing(None))
        self.assertTrue(is_missing(float("nan")))
        self.assertFalse(is_missing("nan"))
        self.assertFalse(is_missing(0))
        self.assertTrue(is_number(np.float64(1.5)))
        self.assertFalse(is_number(True))
        self.assertFalse(is_number("1"))
        self.assertEqual(sort_labels([3, "a", 1]), [1, 3, "a"])

    def test_nan_survives_as_float(self) -> None:
        ds = as_dataset({"x": [1.0, None, 3.0]})
        values = ds.column("x")
        self.assertTrue(math.isnan(values[1]))
        self.assertIsInstance(ds, Dataset)


if __name__ == "__main__":
    unittest.main()
