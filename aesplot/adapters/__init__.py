from .columns import Dataset, as_dataset, is_missing, is_number, sort_labels

__all__ = [
    "Dataset",
    "as_dataset",
    "is_missing",
    "is_number",
    "sort_labels",
]
