"""Checks on lists of multisig owners."""

from __future__ import annotations

from collections.abc import Hashable, Iterable

from multisig.errors import ErrorCode, MultisigError


def assert_unique_owner(owners: Iterable[Hashable]) -> None:
    """Raise ``MultisigError(INVALID_THRESHOLD)`` if any owner appears twice."""
    seen: set[Hashable] = set()
    for owner in owners:
        if owner in seen:
            raise MultisigError(ErrorCode.INVALID_THRESHOLD)
        seen.add(owner)