"""Shared domain - common helpers used across the pipeline."""

from .helpers import (
    replace_special_characters,
    is_equal,
    reduce_to_clean_obj,
    filter_keys,
    extract_unique_keys,
    derive_name_from_filepath,
    structural_key,
)

__all__ = [
    "replace_special_characters",
    "is_equal",
    "reduce_to_clean_obj",
    "filter_keys",
    "extract_unique_keys",
    "derive_name_from_filepath",
    "structural_key",
]
