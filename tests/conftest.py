"""Shared fixtures: every test gets a fresh default context and a headless tour environment."""

from dataclasses import dataclass

import pytest

from featuretour import i18n
from featuretour.anchors import AnchorRegistry
from featuretour.models import Tour
from featuretour.navigation import FeatureTour, TourContext, reset_tour_context
from featuretour.overlay import OverlayState
from featuretour.services.service_locator import services
from featuretour.tour_run import start_tour
from featuretour.windows import WindowManager


@pytest.fixture(autouse=True)
def _isolated_services():
    services.clear()
    i18n.set_locale("en")
    reset_tour_context()
    yield
    reset_tour_context()
    services.clear()
    i18n.set_locale("en")


@dataclass
class TourEnv:
    windows: WindowManager
    anchors: AnchorRegistry
    overlay: OverlayState
    context: TourContext

    @property
    def navigator(self) -> FeatureTour:
        return FeatureTour.get_navigator(self.context)

    def start(self, tour: Tour):
        return start_tour(tour, self.anchors, self.windows, self.overlay, context=self.context)


@pytest.fixture()
def env():
    overlay = OverlayState()
    windows = WindowManager(main_window_id="W1", overlay=overlay)
    windows.register_window("W2")
    anchors = AnchorRegistry()
    anchors.attach(windows)
    return TourEnv(windows=windows, anchors=anchors, overlay=overlay, context=TourContext())

