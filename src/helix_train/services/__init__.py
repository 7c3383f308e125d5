"""Services for helix-train."""

from .instantiation import add_set, freeform_instance, instantiate, instantiate_block
from .progress import (
    block_subtotals,
    compute_completion_ratio,
    compute_elapsed,
    compute_remaining,
    compute_volume,
    summarize,
)

__all__ = [
    "add_set",
    "block_subtotals",
    "compute_completion_ratio",
    "compute_elapsed",
    "compute_remaining",
    "compute_volume",
    "freeform_instance",
    "instantiate",
    "instantiate_block",
    "summarize",
]
