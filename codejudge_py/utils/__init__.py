"""Utility functions."""

from .terminal import (
    choose_index,
    format_result_color,
    create_table,
)

__all__ = [
    "choose_index",
    "format_result_color",
    "create_table",
]
