# app/domain/paging.py
from __future__ import annotations


def resolve_offset(stored: int | None, total: int) -> int:
    """
    Effective start offset for this run. The feed is treated as a ring of
    fixed-size pages: anything negative or past the end restarts at 0.
    """
    offset = int(stored or 0)
    if offset < 0:
        return 0
    if offset >= total:
        return 0
    return offset


def advance_offset(offset: int, page_size: int, total: int) -> int:
    """Next cursor, always in [0, total)."""
    nxt = offset + page_size
    if nxt >= total or nxt < 0:
        return 0
    return nxt
