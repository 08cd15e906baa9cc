# -*- coding: utf-8 -*-
########################
# mods.py
########################
# Purpose:
# - Read-only modifier surface consumed by difficulty and performance calculation.
# - Ships a bit-flag implementation using the legacy osu! mod bit values.
#
# Design notes:
# - Calculators only call the is_* queries. Any object with those methods works.
# - Rate changes (DT/HT) are already folded into converted target times by the caller.
#   The flags exist here so a caller can round-trip the bits it received.
#
########################
# Interfaces:
# Public protocols:
# - class ModifierSet(Protocol)
#   - is_hidden() / is_flashlight() / is_easy() / is_touch_device() / is_no_fail() / is_spun_out() -> bool
#
# Public enums:
# - class Mods(enum.IntFlag): NO_MOD | NO_FAIL | EASY | TOUCH_DEVICE | HIDDEN | HARD_ROCK | DOUBLE_TIME
#                             | HALF_TIME | NIGHTCORE | FLASHLIGHT | SPUN_OUT
#
# Public functions:
# - as_modifier_set(value: ModifierSet | int | None) -> ModifierSet
# - mods_from_acronyms(text: str) -> Mods
#
########################

from __future__ import annotations

import enum
from typing import Protocol, Union, runtime_checkable


@runtime_checkable
class ModifierSet(Protocol):
    def is_hidden(self) -> bool: ...

    def is_flashlight(self) -> bool: ...

    def is_easy(self) -> bool: ...

    def is_touch_device(self) -> bool: ...

    def is_no_fail(self) -> bool: ...

    def is_spun_out(self) -> bool: ...


class Mods(enum.IntFlag):
    NO_MOD = 0
    NO_FAIL = 1 << 0
    EASY = 1 << 1
    TOUCH_DEVICE = 1 << 2
    HIDDEN = 1 << 3
    HARD_ROCK = 1 << 4
    DOUBLE_TIME = 1 << 6
    HALF_TIME = 1 << 8
    NIGHTCORE = 1 << 9
    FLASHLIGHT = 1 << 10
    SPUN_OUT = 1 << 12

    def is_hidden(self) -> bool:
        return bool(self & Mods.HIDDEN)

    def is_flashlight(self) -> bool:
        return bool(self & Mods.FLASHLIGHT)

    def is_easy(self) -> bool:
        return bool(self & Mods.EASY)

    def is_touch_device(self) -> bool:
        return bool(self & Mods.TOUCH_DEVICE)

    def is_no_fail(self) -> bool:
        return bool(self & Mods.NO_FAIL)

    def is_spun_out(self) -> bool:
        return bool(self & Mods.SPUN_OUT)


_ACRONYMS = {
    "NF": Mods.NO_FAIL,
    "EZ": Mods.EASY,
    "TD": Mods.TOUCH_DEVICE,
    "HD": Mods.HIDDEN,
    "HR": Mods.HARD_ROCK,
    "DT": Mods.DOUBLE_TIME,
    "HT": Mods.HALF_TIME,
    "NC": Mods.NIGHTCORE | Mods.DOUBLE_TIME,
    "FL": Mods.FLASHLIGHT,
    "SO": Mods.SPUN_OUT,
}


def as_modifier_set(value: Union[ModifierSet, int, None]) -> ModifierSet:
    """Accept a ModifierSet, raw legacy bits or None (no modifiers)."""
    if value is None:
        return Mods.NO_MOD
    if isinstance(value, Mods):
        return value
    if isinstance(value, int):
        return Mods(int(value) & _KNOWN_BITS)
    return value


def mods_from_acronyms(text: str) -> Mods:
    """Parse concatenated two-letter acronyms such as ``"HDDT"``. ``"NM"`` means no mod."""
    normalized = (text or "").strip().upper().replace(" ", "").replace(",", "")
    if normalized in ("", "NM", "NOMOD"):
        return Mods.NO_MOD
    if len(normalized) % 2 != 0:
        raise ValueError(f"Modifier acronyms must be pairs of letters, got: {text!r}")

    result = Mods.NO_MOD
    for index in range(0, len(normalized), 2):
        acronym = normalized[index : index + 2]
        flag = _ACRONYMS.get(acronym)
        if flag is None:
            raise ValueError(f"Unknown modifier acronym: {acronym!r}")
        result |= flag
    return result


_KNOWN_BITS = 0
for _flag in Mods:
    _KNOWN_BITS |= int(_flag)


def _run_unit_tests() -> None:
    mods = mods_from_acronyms("HDFL")
    assert mods.is_hidden() and mods.is_flashlight()
    assert not mods.is_easy()
    assert as_modifier_set(8 + 64).is_hidden()
    assert not as_modifier_set(None).is_touch_device()
    assert isinstance(Mods.EASY, ModifierSet)
    try:
        mods_from_acronyms("XX")
    except ValueError:
        pass
    else:
        raise AssertionError("Expected ValueError for unknown acronym")


if __name__ == "__main__":
    _run_unit_tests()
    print("mods.py: ok")
