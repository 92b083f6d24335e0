"""Core logic: resource sizing, price tables and hardware analysis."""

from .sizing import (
    PERFORMANCE_LEVELS,
    ModelRequirements,
    calculate_model_requirements,
    get_model_requirements,
)
from .pricing import InstanceOffer, cheapest_offer, find_cheapest_for_provider

__all__ = [
    "PERFORMANCE_LEVELS",
    "ModelRequirements",
    "calculate_model_requirements",
    "get_model_requirements",
    "InstanceOffer",
    "cheapest_offer",
    "find_cheapest_for_provider",
]
