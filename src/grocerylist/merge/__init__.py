"""Optional network-backed semantic merging of grocery lines."""

from grocerylist.merge.smart_merge import (
    SmartCombineOutcome,
    SmartMergeClient,
    SmartMergeFailed,
    SmartMergeOk,
    SmartMergeResult,
    SmartMergeUnavailable,
    smart_combine_ingredients,
)

__all__ = [
    "SmartCombineOutcome",
    "SmartMergeClient",
    "SmartMergeFailed",
    "SmartMergeOk",
    "SmartMergeResult",
    "SmartMergeUnavailable",
    "smart_combine_ingredients",
]
