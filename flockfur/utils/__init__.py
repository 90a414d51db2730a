"""
==============================================================================
Utilities Package
==============================================================================

Modules:
--------
- fees: Platform fee / cleaner payout split and currency conversion
- email_templates: HTML bodies for notification emails

==============================================================================
"""

from .fees import (
    PLATFORM_FEE_PERCENT,
    PaymentSplit,
    calculate_split,
    to_minor_units,
    to_money,
)

__all__ = [
    "PLATFORM_FEE_PERCENT",
    "PaymentSplit",
    "calculate_split",
    "to_minor_units",
    "to_money",
]
