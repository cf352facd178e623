import logging

import pytest

from featuretour.models import AnchorDescriptor, Placement
from featuretour.overlay import OverlayState


def _anchor(alive=True, anchor_id="a"):
    return AnchorDescriptor(anchor_id, "W1", placement=Placement.CENTER, liveness=lambda: alive)


def test_inactive_overlay_ignores_show_and_hide():
    overlay = OverlayState()
    overlay.show()
    overlay.hide()
    assert not overlay.visible
    assert overlay.show_count == 0
    assert overlay.hide_count == 0


def test_move_to_hides_then_shows_on_exit():
    overlay = OverlayState()
    overlay.begin_tour(object())
    with overlay.move_to(_anchor()):
        assert not overlay.visible
    assert overlay.visible
    assert overlay.anchor_id == "a"
    assert overlay.placement is Placement.CENTER


def test_move_to_shows_even_when_body_raises():
    overlay = OverlayState()
    overlay.begin_tour(object())
    with pytest.raises(RuntimeError):
        with overlay.move_to(_anchor()):
            raise RuntimeError("hook failed")
    assert overlay.visible


def test_dead_anchor_is_not_shown(caplog):
    overlay = OverlayState()
    overlay.begin_tour(object())
    with caplog.at_level(logging.WARNING):
        with overlay.move_to(_anchor(alive=False)):
            pass
    assert not overlay.visible
    assert overlay.anchor_id is None
    assert any("could not find placement target" in r.getMessage() for r in caplog.records)


def test_end_tour_without_tour_warns(caplog):
    overlay = OverlayState()
    with caplog.at_level(logging.WARNING):
        overlay.end_tour()
    assert any("has not been started" in r.getMessage() for r in caplog.records)


def test_end_tour_releases_state():
    overlay = OverlayState()
    overlay.begin_tour(object())
    with overlay.move_to(_anchor()):
        pass
    overlay.end_tour()
    assert not overlay.active
    assert not overlay.visible
    assert overlay.anchor is None


def test_reposition_hides_when_anchor_vanishes():
    overlay = OverlayState()
    overlay.begin_tour(object())
    alive = {"value": True}
    anchor = AnchorDescriptor("a", "W1", liveness=lambda: alive["value"])
    with overlay.move_to(anchor):
        pass
    alive["value"] = False
    overlay.reposition_if_needed()
    assert overlay.reposition_count == 1
    assert not overlay.visible
