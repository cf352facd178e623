import pytest

from featuretour.anchors import AnchorRegistry
from featuretour.models import Placement, WindowTransitionBehavior
from featuretour.windows import WindowManager


def test_register_and_resolve():
    reg = AnchorRegistry()
    reg.register("save", "W1", placement=Placement.BOTTOM_CENTER)
    anchor = reg.resolve("save")
    assert anchor.anchor_id == "save"
    assert anchor.window_id == "W1"
    assert anchor.placement is Placement.BOTTOM_CENTER
    assert anchor.transition is WindowTransitionBehavior.AUTOMATIC


def test_resolve_missing_is_none():
    assert AnchorRegistry().resolve("nope") is None


def test_empty_anchor_id_rejected():
    with pytest.raises(ValueError):
        AnchorRegistry().register("", "W1")


def test_unloaded_only_resolved_on_request():
    reg = AnchorRegistry()
    reg.register("tab", "W1", loaded=False)
    assert reg.resolve("tab") is None
    assert reg.resolve("tab", include_unloaded=True).loaded is False
    reg.set_loaded("tab", True)
    assert reg.resolve("tab") is not None


def test_last_registration_wins():
    reg = AnchorRegistry()
    reg.register("a", "W1")
    reg.register("a", "W2")
    assert reg.resolve("a").window_id == "W2"
    assert len(reg) == 1


def test_dead_anchors_are_not_resolved_and_pruned():
    reg = AnchorRegistry()
    alive = {"value": True}
    reg.register("a", "W1", liveness=lambda: alive["value"])
    assert reg.resolve("a") is not None
    alive["value"] = False
    assert reg.resolve("a") is None
    reg.register("b", "W1")
    assert len(reg) == 1


def test_resolve_all_filters_unloaded():
    reg = AnchorRegistry()
    reg.register("a", "W1")
    reg.register("b", "W1", loaded=False)
    assert [a.anchor_id for a in reg.resolve_all()] == ["a"]
    assert {a.anchor_id for a in reg.resolve_all(include_unloaded=True)} == {"a", "b"}


def test_update_changes_transition():
    reg = AnchorRegistry()
    reg.register("a", "W1")
    reg.update("a", transition=WindowTransitionBehavior.NONE, window_id="W2")
    anchor = reg.resolve("a")
    assert anchor.transition is WindowTransitionBehavior.NONE
    assert anchor.window_id == "W2"


def test_unregister():
    reg = AnchorRegistry()
    reg.register("a", "W1")
    reg.unregister("a")
    reg.unregister("a")
    assert reg.resolve("a") is None


def test_removed_window_drops_its_anchors():
    windows = WindowManager(main_window_id="W1")
    windows.register_window("W2")
    reg = AnchorRegistry()
    reg.attach(windows)
    reg.register("main", "W1")
    reg.register("dialog", "W2")
    windows.remove_window("W2")
    assert reg.resolve("dialog") is None
    assert reg.resolve("main") is not None
