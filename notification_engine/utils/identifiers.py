"""Identifier helpers shared by models and use cases."""

from uuid import uuid4


def generate_id() -> str:
    """Return a new random identifier in canonical UUID form."""

    return str(uuid4())


__all__ = ["generate_id"]
