"""strainpp: strain-based difficulty and performance calculation for converted beatmaps."""

from strainpp.attributes import (
    DifficultyAttributes,
    PerformanceAttributes,
    ScoreState,
    Strains,
    attributes_of,
)
from strainpp.difficulty import DifficultyCalculator, calculate_difficulty, calculate_strains
from strainpp.gradual import GradualDifficulty, GradualPerformance
from strainpp.hitresults import HitResultPriority, generate_hitresults
from strainpp.map_models import ConvertedMap, NestedTarget, Target, TargetKind
from strainpp.mods import ModifierSet, Mods, mods_from_acronyms
from strainpp.performance import PerformanceCalculator, calculate_performance

__all__ = [
    "ConvertedMap",
    "DifficultyAttributes",
    "DifficultyCalculator",
    "GradualDifficulty",
    "GradualPerformance",
    "HitResultPriority",
    "ModifierSet",
    "Mods",
    "NestedTarget",
    "PerformanceAttributes",
    "PerformanceCalculator",
    "ScoreState",
    "Strains",
    "Target",
    "TargetKind",
    "attributes_of",
    "calculate_difficulty",
    "calculate_performance",
    "calculate_strains",
    "generate_hitresults",
    "mods_from_acronyms",
]
