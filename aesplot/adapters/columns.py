from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping, Sequence
from decimal import Decimal
from typing import Any

import numpy as np
import pandas as pd

from aesplot.errors import PlotDataError


try:
    import torch
except Exception:  # pragma: no cover - optional dependency
    torch = None  # type: ignore[assignment]


RowPredicate = Callable[[dict[str, Any]], bool]


class Dataset:
    """Read-only columnar access over an in-memory pandas DataFrame."""

    __slots__ = ("_frame",)

    def __init__(self, frame: pd.DataFrame) -> None:
        if not isinstance(frame, pd.DataFrame):
            raise PlotDataError("`frame` must be a pandas DataFrame")
        self._frame = frame

    def __repr__(self) -> str:
        return f"Dataset(rows={self.row_count()}, columns={list(self.columns)!r})"

    def __len__(self) -> int:
        return self.row_count()

    @property
    def frame(self) -> pd.DataFrame:
        return self._frame

    @property
    def columns(self) -> tuple[str, ...]:
        return tuple(str(c) for c in self._frame.columns)

    def row_count(self) -> int:
        return int(len(self._frame))

    def has_column(self, name: Any) -> bool:
        return name in self._frame.columns

    def column(self, name: Any) -> list[Any]:
        if not self.has_column(name):
            raise PlotDataError(f"column not found: {name}")
        return [_unbox(v) for v in self._frame[name].tolist()]

    def distinct(self, name: Any, *, sort: bool = False) -> list[Any]:
        values = [v for v in self.column(name) if not is_missing(v)]
        out = list(dict.fromkeys(values))
        return sort_labels(out) if sort else out

    def rows(self) -> Iterator[dict[str, Any]]:
        for record in self._frame.to_dict(orient="records"):
            yield {k: _unbox(v) for k, v in record.items()}

    def filter(self, predicate: Sequence[bool] | RowPredicate) -> "Dataset":
        if callable(predicate):
            mask = [bool(predicate(row)) for row in self.rows()]
        else:
            mask = [bool(v) for v in predicate]
        if len(mask) != self.row_count():
            raise PlotDataError(f"row mask length mismatch: {len(mask)} != {self.row_count()}")
        selected = self._frame.loc[np.asarray(mask, dtype=bool)]
        return Dataset(selected.reset_index(drop=True))


def as_dataset(data: Any) -> Dataset:
    if isinstance(data, Dataset):
        return data
    if isinstance(data, pd.DataFrame):
        return Dataset(data)
    if isinstance(data, Mapping):
        columns = {name: _coerce_column(values, label=str(name)) for name, values in data.items()}
        lengths = {len(values) for values in columns.values()}
        if len(lengths) > 1:
            raise PlotDataError(f"columns have mismatched lengths: {sorted(lengths)}")
        return Dataset(pd.DataFrame(columns))
    raise PlotDataError(f"unsupported data input type: {type(data)!r}")


def is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (str, bytes)):
        return False
    try:
        result = pd.isna(value)
    except (TypeError, ValueError):
        return False
    if isinstance(result, (bool, np.bool_)):
        return bool(result)
    return False


def is_number(value: Any) -> bool:
    if isinstance(value, (bool, np.bool_)):
        return False
    return isinstance(value, (int, float, Decimal, np.integer, np.floating))


def sort_labels(values: Sequence[Any]) -> list[Any]:
    try:
        return sorted(values)
    except TypeError:
        return sorted(values, key=lambda v: (type(v).__name__, str(v)))


def _unbox(value: Any) -> Any:
    if isinstance(value, np.generic):
        return value.item()
    return value


def _coerce_column(values: Any, *, label: str) -> list[Any]:
    if torch is not None and isinstance(values, torch.Tensor):
        tensor = values.detach()
        if tensor.ndim != 1:
            raise PlotDataError(f"column {label} must be 1-D")
        if tensor.is_cuda:
            tensor = tensor.cpu()
        return tensor.numpy().tolist()

    if isinstance(values, pd.Series):
        return values.tolist()

    if isinstance(values, np.ndarray):
        if values.ndim != 1:
            raise PlotDataError(f"column {label} must be 1-D")
        return values.tolist()

    if isinstance(values, Sequence) and not isinstance(values, (str, bytes, bytearray)):
        return list(values)

    raise PlotDataError(f"unsupported column {label} input type: {type(values)!r}")
