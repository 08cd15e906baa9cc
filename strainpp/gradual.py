# -*- coding: utf-8 -*-
########################
# gradual.py
########################
# Purpose:
# - Difficulty and performance of a play in progress, one target (or a batch) at a time.
#
# Design notes:
# - The skill state lives inside the iterator and persists across advance() calls.
# - Difficulty targets are built for the whole map up front, so a target can still look at the one
#   after it even though that target has not been consumed yet.
# - The first target only seeds the sequence and adds no strain; its call still yields attributes.
# - advance() returns None once every target is consumed.
# - Not meant to be shared between call sites. Nothing here is locked.
#
########################
# Interfaces:
# Public classes:
# - class GradualDifficulty
#   - __init__(converted_map: ConvertedMap, mods=None)
#   - advance(n: int = 1) -> DifficultyAttributes | None
#   - __iter__() / __next__() / __len__()
#   - consumed -> int
# - class GradualPerformance
#   - __init__(converted_map: ConvertedMap, mods=None)
#   - advance(state: ScoreState, n: int = 1) -> PerformanceAttributes | None
#   - __len__()
#
########################

from __future__ import annotations

import logging
from typing import Iterator, List, Optional

from strainpp.attributes import DifficultyAttributes, PerformanceAttributes, ScoreState
from strainpp.difficulty import attributes_from_skills, new_skill_set
from strainpp.difficulty_object import DifficultyTarget, build_difficulty_targets
from strainpp.map_models import ConvertedMap
from strainpp.mods import as_modifier_set
from strainpp.performance import PerformanceCalculator

logger = logging.getLogger(__name__)


class GradualDifficulty:
    def __init__(self, converted_map: ConvertedMap, mods=None) -> None:
        self._map = converted_map
        self._mods = as_modifier_set(mods)
        self._skills = new_skill_set(converted_map, self._mods)
        self._difficulty_targets: List[DifficultyTarget] = build_difficulty_targets(converted_map)
        self._consumed = 0

    @property
    def consumed(self) -> int:
        return self._consumed

    def __len__(self) -> int:
        return max(0, len(self._map) - self._consumed)

    def __iter__(self) -> Iterator[DifficultyAttributes]:
        return self

    def __next__(self) -> DifficultyAttributes:
        attributes = self.advance(1)
        if attributes is None:
            raise StopIteration
        return attributes

    def advance(self, n: int = 1) -> Optional[DifficultyAttributes]:
        """Consume ``max(n, 1)`` further targets and rate everything consumed so far."""
        remaining = len(self)
        if remaining == 0:
            logger.debug("Gradual difficulty exhausted after %d targets", self._consumed)
            return None

        step = min(max(int(n), 1), remaining)
        for target_index in range(self._consumed, self._consumed + step):
            if target_index > 0:
                self._skills.process(self._difficulty_targets[target_index - 1])
        self._consumed += step

        return attributes_from_skills(self._skills, self._map.truncated(self._consumed), self._mods)


class GradualPerformance:
    """Running performance of a play; the caller supplies the current score state on every call."""

    def __init__(self, converted_map: ConvertedMap, mods=None) -> None:
        self._map = converted_map
        self._mods = as_modifier_set(mods)
        self._difficulty = GradualDifficulty(converted_map, self._mods)

    def __len__(self) -> int:
        return len(self._difficulty)

    def advance(self, state: ScoreState, n: int = 1) -> Optional[PerformanceAttributes]:
        attributes = self._difficulty.advance(n)
        if attributes is None:
            return None

        return (
            PerformanceCalculator(self._map)
            .mods(self._mods)
            .attributes(attributes)
            .passed_objects(self._difficulty.consumed)
            .state(state)
            .calculate()
        )
