from __future__ import annotations

from enum import IntEnum

from rocketpool_paths.core.errors import InvalidInputError


class MinipoolDeposit(IntEnum):
    """Deposit type passed to the minipool constructor.

    Values mirror the ``MinipoolDeposit`` enum in the Rocket Pool contracts
    and are ABI-encoded as ``uint8``; they must never be renumbered.
    """

    NONE = 0
    FULL = 1
    HALF = 2
    EMPTY = 3


def to_minipool_deposit(value: MinipoolDeposit | int | str) -> MinipoolDeposit:
    if isinstance(value, MinipoolDeposit):
        return value
    if isinstance(value, str):
        key = value.strip().upper()
        if key in MinipoolDeposit.__members__:
            return MinipoolDeposit[key]
        if not key.isdigit():
            raise InvalidInputError(f"Unknown minipool deposit type: {value}")
        value = int(key)
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidInputError(f"Unknown minipool deposit type: {value!r}")
    try:
        return MinipoolDeposit(value)
    except ValueError as exc:
        raise InvalidInputError(f"Unknown minipool deposit type: {value}") from exc
