"""Message formatting shared by the action's exception types."""

from __future__ import annotations

from typing import Optional


def format_default_message(default_message: str, detail: Optional[str]) -> str:
    """Join a default message with an optional detail string."""
    if detail:
        return f"{default_message}: {detail}"
    return default_message


__all__ = ["format_default_message"]
