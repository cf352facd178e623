"""Data model for feature tours.

A ``Tour`` is an ordered, immutable collection of ``Step`` objects, each bound
to a UI anchor by id. When a run starts the steps are wrapped in a doubly
linked chain of ``StepNode`` objects; that chain is built once and never
rebuilt.

``AnchorDescriptor`` is what an anchor resolver hands back for a step: where
the anchor lives (window), how the popup should be placed and what to do when
the active window changes. Descriptors are transient; callers must not keep
them beyond a single transition.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Hashable, List, Optional, Sequence

__all__ = [
    "Placement",
    "WindowTransitionBehavior",
    "Step",
    "Tour",
    "TourValidationError",
    "StepNode",
    "build_step_chain",
    "AnchorDescriptor",
]

_logger = logging.getLogger(__name__)


class TourValidationError(ValueError):
    """Raised when a tour definition cannot be run."""


class Placement(str, Enum):
    TOP_LEFT = "top_left"
    TOP_CENTER = "top_center"
    TOP_RIGHT = "top_right"
    RIGHT_TOP = "right_top"
    RIGHT_CENTER = "right_center"
    RIGHT_BOTTOM = "right_bottom"
    BOTTOM_RIGHT = "bottom_right"
    BOTTOM_CENTER = "bottom_center"
    BOTTOM_LEFT = "bottom_left"
    LEFT_BOTTOM = "left_bottom"
    LEFT_CENTER = "left_center"
    LEFT_TOP = "left_top"
    CENTER = "center"


class WindowTransitionBehavior(str, Enum):
    """What the run does with the popup when another window gets activated."""

    NONE = "none"
    AUTOMATIC = "automatic"
    NEXT_HIDE = "next_hide"
    PREVIOUS_HIDE = "previous_hide"
    NEXT_PREVIOUS_HIDE = "next_previous_hide"

    @property
    def tries_next(self) -> bool:
        return self in (WindowTransitionBehavior.NEXT_HIDE, WindowTransitionBehavior.NEXT_PREVIOUS_HIDE)

    @property
    def tries_previous(self) -> bool:
        return self in (
            WindowTransitionBehavior.PREVIOUS_HIDE,
            WindowTransitionBehavior.NEXT_PREVIOUS_HIDE,
        )


@dataclass(frozen=True)
class Step:
    id: str
    anchor_id: str
    header: Any = None
    content: Any = None
    tag: Any = None
    show_next_button: Optional[bool] = None  # None -> use tour default
    header_template_key: Optional[str] = None
    content_template_key: Optional[str] = None


@dataclass(frozen=True)
class Tour:
    name: str
    steps: Sequence[Step] = field(default_factory=tuple)
    show_next_button_default: bool = False
    enable_next_button_always: bool = False

    def step_ids(self) -> List[str]:  # convenience
        return [s.id for s in self.steps]

    def validate(self) -> None:
        """Raise ``TourValidationError`` unless the tour can be started."""
        if self.steps is None:
            raise TourValidationError(f"Tour '{self.name}' has no step sequence")
        if len(self.steps) == 0:
            raise TourValidationError(f"Unable to start tour '{self.name}' without steps")
        for index, step in enumerate(self.steps):
            if step is None:
                raise TourValidationError(f"Step #{index + 1} of tour '{self.name}' is None")
            if not step.anchor_id:
                raise TourValidationError(
                    f"Step '{step.id}' of tour '{self.name}' has no anchor id"
                )


class StepNode:
    """One link of the step chain."""

    __slots__ = ("step", "step_no", "previous", "next")

    def __init__(self, step: Step, step_no: int, previous: Optional["StepNode"] = None) -> None:
        self.step = step
        self.step_no = step_no
        self.previous = previous
        self.next: Optional[StepNode] = None

    @property
    def next_step(self) -> Optional[Step]:
        return self.next.step if self.next is not None else None

    @property
    def previous_step(self) -> Optional[Step]:
        return self.previous.step if self.previous is not None else None

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"StepNode({self.step.id!r}, step_no={self.step_no})"


def build_step_chain(steps: Sequence[Step]) -> StepNode:
    """Link ``steps`` into a chain and return its first node."""
    first: Optional[StepNode] = None
    prev: Optional[StepNode] = None
    for counter, step in enumerate(steps, start=1):
        node = StepNode(step, counter, previous=prev)
        if prev is None:
            first = node
        else:
            prev.next = node
        prev = node
    if first is None:
        raise TourValidationError("Cannot build a step chain from an empty sequence")
    return first


def _always_alive() -> bool:
    return True


@dataclass(frozen=True)
class AnchorDescriptor:
    anchor_id: str
    window_id: Hashable
    placement: Placement = Placement.TOP_LEFT
    transition: WindowTransitionBehavior = WindowTransitionBehavior.AUTOMATIC
    loaded: bool = True
    liveness: Callable[[], bool] = field(default=_always_alive, compare=False, repr=False)
    template_lookup: Optional[Callable[[str], Any]] = field(default=None, compare=False, repr=False)

    def is_alive(self) -> bool:
        return bool(self.liveness())

    def find_template(self, key: Optional[str]) -> Any:
        """Resolve a template key relative to the anchor.

        Without a lookup the key itself is returned so the presentation layer
        can resolve it. Returns None for empty keys and for keys the lookup
        does not know.
        """
        if not key or not key.strip():
            return None
        if self.template_lookup is None:
            return key
        if not self.is_alive():
            _logger.warning(
                "Anchor '%s' is no longer alive; template '%s' can not be applied",
                self.anchor_id,
                key,
            )
            return None
        template = self.template_lookup(key)
        if template is None:
            _logger.warning(
                "Could not find template '%s' relative to anchor '%s'", key, self.anchor_id
            )
        return template
