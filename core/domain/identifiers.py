from __future__ import annotations

from uuid import uuid4


def generate_id() -> str:
    return str(uuid4())


def pair_key(first_id: str, second_id: str) -> tuple[str, str]:
    """Order-independent key for a pair of entity ids."""
    return (first_id, second_id) if first_id <= second_id else (second_id, first_id)


__all__ = ["generate_id", "pair_key"]
