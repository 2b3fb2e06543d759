"""Numeric operation type codes and their display names."""

from __future__ import annotations

TYPE_NAMES: dict[int, str] = {
    0: "create_account",
    1: "payment",
    2: "path_payment",
    3: "manage_offer",
    4: "create_passive_offer",
    5: "set_options",
    6: "change_trust",
    7: "allow_trust",
    8: "account_merge",
    9: "inflation",
    10: "manage_data",
    11: "bump_sequence",
    12: "manage_buy_offer",
}


def type_name(code: int) -> str:
    """Display name for an operation type; unknown codes map to ``""``."""
    return TYPE_NAMES.get(code, "")


__all__ = ["TYPE_NAMES", "type_name"]
