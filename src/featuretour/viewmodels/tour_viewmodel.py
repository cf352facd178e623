"""ViewModel behind the tour popup.

The run writes display state into it on every successful transition; the
presentation layer reads it and binds its buttons to the command methods.
No toolkit imports so unit tests can exercise it without a GUI.
"""

from __future__ import annotations

from typing import Any, Callable, List, Optional, TYPE_CHECKING

from featuretour import i18n
from featuretour.models import Placement

if TYPE_CHECKING:  # pragma: no cover
    from featuretour.tour_run import TourRun

__all__ = ["TourViewModel", "PropertyObserver"]

PropertyObserver = Callable[[str, Any], None]


class TourViewModel:
    """Display state of the popup plus its button commands.

    Subclass it (and install a factory on the ``TourContext``) to expose extra
    properties to custom templates.
    """

    def __init__(self, run: "TourRun") -> None:
        if run is None:
            raise ValueError("run must not be None")
        self._run = run
        self._observers: List[PropertyObserver] = []
        self._close_text = i18n.t(i18n.CLOSE)
        self._next_text = i18n.t(i18n.NEXT)
        self.do_it_text = i18n.t(i18n.DO_IT)

        self._header: Any = None
        self._content: Any = None
        self._header_template: Any = None
        self._content_template: Any = None
        self._steps_label = ""
        self._placement = Placement.TOP_LEFT
        self._actual_placement = Placement.TOP_LEFT
        self._button_text = self._next_text
        self._show_do_it = False
        self._show_next = False
        self._current_step_no = 1
        self._total_steps_count = 1
        self._has_tour_finished = True

    # Change notification ------------------------------------------
    def subscribe(self, observer: PropertyObserver) -> Callable[[], None]:
        self._observers.append(observer)

        def _unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return _unsubscribe

    def _set(self, name: str, value: Any) -> bool:
        attr = "_" + name
        if getattr(self, attr) == value:
            return False
        setattr(self, attr, value)
        for observer in list(self._observers):
            observer(name, value)
        return True

    # Properties -----------------------------------------------------
    @property
    def header(self) -> Any:
        return self._header

    @header.setter
    def header(self, value: Any) -> None:
        self._set("header", value)

    @property
    def content(self) -> Any:
        return self._content

    @content.setter
    def content(self, value: Any) -> None:
        self._set("content", value)

    @property
    def header_template(self) -> Any:
        return self._header_template

    @header_template.setter
    def header_template(self, value: Any) -> None:
        self._set("header_template", value)

    @property
    def content_template(self) -> Any:
        return self._content_template

    @content_template.setter
    def content_template(self, value: Any) -> None:
        self._set("content_template", value)

    @property
    def steps_label(self) -> str:
        return self._steps_label

    @steps_label.setter
    def steps_label(self, value: str) -> None:
        self._set("steps_label", value)

    @property
    def placement(self) -> Placement:
        return self._placement

    @placement.setter
    def placement(self, value: Placement) -> None:
        if self._set("placement", value):
            self.actual_placement = value

    @property
    def actual_placement(self) -> Placement:
        """Placement the presenter actually used (it may flip near screen edges)."""
        return self._actual_placement

    @actual_placement.setter
    def actual_placement(self, value: Placement) -> None:
        self._set("actual_placement", value)

    @property
    def button_text(self) -> str:
        return self._button_text

    @button_text.setter
    def button_text(self, value: str) -> None:
        self._set("button_text", value)

    def set_close_text(self) -> None:
        self.button_text = self._close_text

    def set_next_text(self) -> None:
        self.button_text = self._next_text

    @property
    def shows_close(self) -> bool:
        return self._button_text == self._close_text

    @property
    def show_do_it(self) -> bool:
        return self._show_do_it

    @show_do_it.setter
    def show_do_it(self, value: bool) -> None:
        self._set("show_do_it", bool(value))

    @property
    def show_next(self) -> bool:
        return self._show_next or self.shows_close

    @show_next.setter
    def show_next(self, value: bool) -> None:
        self._set("show_next", bool(value))

    @property
    def current_step_no(self) -> int:
        return self._current_step_no

    @current_step_no.setter
    def current_step_no(self, value: int) -> None:
        if self._set("current_step_no", value):
            self._update_finished()

    @property
    def total_steps_count(self) -> int:
        return self._total_steps_count

    @total_steps_count.setter
    def total_steps_count(self, value: int) -> None:
        if self._set("total_steps_count", value):
            self._update_finished()

    def _update_finished(self) -> None:
        self._set("has_tour_finished", self._current_step_no == self._total_steps_count)

    @property
    def has_tour_finished(self) -> bool:
        return self._has_tour_finished

    # Commands ---------------------------------------------------------
    def next_or_close(self) -> bool:
        if self.shows_close:
            self._run.close()
            return True
        return self._run.next_step(False)

    def can_next_or_close(self) -> bool:
        return self.shows_close or self._run.can_next_step()

    def do_it(self) -> None:
        self._run.do_it()

    def can_do_it(self) -> bool:
        return self._run.can_do_it()

    def close(self) -> None:
        self._run.close()

    @property
    def run(self) -> Optional["TourRun"]:
        return self._run
