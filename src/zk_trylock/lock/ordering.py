"""Ordering of lock candidate nodes by their sequence suffix.

ZooKeeper appends a zero-padded counter of fixed width to sequential nodes,
so comparing suffixes as strings gives the same order as comparing them as
numbers. That only holds while every suffix has the expected width, so
names are validated before they are ordered.
"""

from __future__ import annotations

from collections.abc import Iterable

from zk_trylock.core.constants import SEQUENCE_SEPARATOR, SEQUENCE_WIDTH
from zk_trylock.core.exceptions import InvalidNodeNameError


def sequence_suffix(name: str, width: int = SEQUENCE_WIDTH) -> str:
    """Return the sequence suffix of a candidate node name.

    Raises:
        InvalidNodeNameError: if the text after the last separator is not
            exactly ``width`` decimal digits
    """
    _, separator, suffix = name.rpartition(SEQUENCE_SEPARATOR)
    if not separator:
        raise InvalidNodeNameError(name, details="no sequence separator")
    if len(suffix) != width or not (suffix.isascii() and suffix.isdigit()):
        raise InvalidNodeNameError(name, details=f"sequence suffix must be {width} digits, got '{suffix}'")
    return suffix


def sort_by_sequence_suffix(children: Iterable[str], width: int = SEQUENCE_WIDTH) -> list[str]:
    """Sort candidate names by sequence suffix, lowest first."""
    return sorted(children, key=lambda name: sequence_suffix(name, width))


def child_floor(ordered: list[str], target: str, width: int = SEQUENCE_WIDTH) -> str | None:
    """Return the last candidate ordered strictly before ``target``.

    Scans the whole ordered sequence and keeps the last element whose
    suffix is below the target's; None if the target is the minimum.
    """
    target_suffix = sequence_suffix(target, width)
    floor = None
    for name in ordered:
        if sequence_suffix(name, width) < target_suffix:
            floor = name
    return floor
