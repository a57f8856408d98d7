from __future__ import annotations


class StoreUnavailable(Exception):
    """The recipe or preference store cannot be read."""
