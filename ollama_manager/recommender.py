"""
Ollama Manager Recommender
RAM/VRAM tier comparisons behind ratings and model suggestions.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from .models.catalog import ModelInfo, compatible_models
from .models.config import (
    CATEGORIES, PERFORMANCE_TIERS, RECOMMENDED_TIERS, SUGGESTIONS_PER_CATEGORY,
)


@dataclass
class Rating:
    label: str
    icon: str

    def __str__(self) -> str:
        return f"{self.label} {self.icon}"


@dataclass
class Suggestion:
    model: ModelInfo
    installed: bool

    @property
    def status(self) -> str:
        return "[INSTALLED]" if self.installed else "[AVAILABLE]"


def performance_rating(ram_gb: int, vram_gb: int) -> Rating:
    for min_ram, min_vram, label, icon in PERFORMANCE_TIERS:
        if ram_gb >= min_ram and vram_gb >= min_vram:
            return Rating(label, icon)
    # PERFORMANCE_TIERS ends with a (0, 0) catch-all
    label, icon = PERFORMANCE_TIERS[-1][2:]
    return Rating(label, icon)


def recommended_models(ram_gb: int) -> List[str]:
    """Models auto-installed by quick start for this much RAM"""
    for min_ram, models in RECOMMENDED_TIERS:
        if ram_gb >= min_ram:
            return list(models)
    return list(RECOMMENDED_TIERS[-1][1])


def suggest_by_category(
    ram_gb: int,
    installed: Iterable[str],
    categories: Optional[List[str]] = None,
    limit: int = SUGGESTIONS_PER_CATEGORY,
    models: Optional[List[ModelInfo]] = None,
) -> Dict[str, List[Suggestion]]:
    """First `limit` compatible models of each category with install status"""
    installed = set(installed)
    result = {}
    for category in categories or CATEGORIES:
        result[category] = [
            Suggestion(model=m, installed=m.name in installed)
            for m in compatible_models(ram_gb, category, models)[:limit]
        ]
    return result
