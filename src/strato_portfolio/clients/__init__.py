from __future__ import annotations

from .cirrus import CirrusClient, owner_filter

__all__ = ["CirrusClient", "owner_filter"]
