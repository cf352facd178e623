"""Feature tour engine.

Guided, step-by-step walkthroughs of an application's UI. A tour is an
ordered list of steps bound to anchors; a run walks the steps, drives a popup
overlay and notifies application code through the navigator hooks.

Typical use::

    from featuretour import Step, Tour, start_tour, FeatureTour

    tour = Tour("intro", steps=[Step("welcome", "header-bar", header="Hi")])
    run = start_tour(tour, anchors, windows, overlay)
"""

from .models import (  # noqa: F401
    AnchorDescriptor,
    Placement,
    Step,
    StepNode,
    Tour,
    TourValidationError,
    WindowTransitionBehavior,
)
from .anchors import AnchorRegistry, AnchorResolver  # noqa: F401
from .overlay import OverlayPresenter, OverlayState  # noqa: F401
from .windows import WindowActivationChanged, WindowCoordinator, WindowManager  # noqa: F401
from .viewmodels import TourViewModel  # noqa: F401
from .navigation import (  # noqa: F401
    FeatureTour,
    HookCategory,
    TourContext,
    get_tour_context,
    reset_tour_context,
)
from .tour_run import RunState, TourRun, TransitionResult, start_tour  # noqa: F401

__all__ = [
    "AnchorDescriptor",
    "Placement",
    "Step",
    "StepNode",
    "Tour",
    "TourValidationError",
    "WindowTransitionBehavior",
    "AnchorRegistry",
    "AnchorResolver",
    "OverlayPresenter",
    "OverlayState",
    "WindowActivationChanged",
    "WindowCoordinator",
    "WindowManager",
    "TourViewModel",
    "FeatureTour",
    "HookCategory",
    "TourContext",
    "get_tour_context",
    "reset_tour_context",
    "RunState",
    "TourRun",
    "TransitionResult",
    "start_tour",
]

__version__ = "0.1.0"
