from .context import (  # noqa: F401
    HookCategory,
    TourContext,
    get_tour_context,
    hook_key,
    reset_tour_context,
)
from .navigator import (  # noqa: F401
    FeatureTour,
    NullTourDoable,
    NullTourExecution,
    NullTourNavigator,
    TourDoable,
    TourExecution,
    TourNavigator,
)

__all__ = [
    "HookCategory",
    "TourContext",
    "get_tour_context",
    "hook_key",
    "reset_tour_context",
    "FeatureTour",
    "TourExecution",
    "NullTourExecution",
    "TourDoable",
    "NullTourDoable",
    "TourNavigator",
    "NullTourNavigator",
]
