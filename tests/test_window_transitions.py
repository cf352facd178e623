import logging

from featuretour.models import WindowTransitionBehavior as Behavior
from tests.factories import make_tour, register_anchors


def test_next_hide_advances_to_step_on_new_window(env):
    register_anchors(env.anchors, "W1", "x", transition=Behavior.NEXT_HIDE)
    register_anchors(env.anchors, "W2", "y")
    run = env.start(make_tour(("a", "x"), ("b", "y")))
    assert env.windows.activate("W2") is True
    assert run.current_step.id == "b"
    assert run.current_window_id == "W2"
    assert env.overlay.visible
    assert env.overlay.anchor_id == "y"


def test_next_hide_includes_unloaded_next_anchor(env):
    register_anchors(env.anchors, "W1", "x", transition=Behavior.NEXT_HIDE)
    register_anchors(env.anchors, "W2", "y", loaded=False)
    run = env.start(make_tour(("a", "x"), ("b", "y")))
    env.windows.activate("W2")
    assert run.current_step.id == "b"


def test_none_policy_leaves_step_and_overlay_untouched(env):
    register_anchors(env.anchors, "W1", "x", transition=Behavior.NONE)
    register_anchors(env.anchors, "W2", "y")
    run = env.start(make_tour(("a", "x"), ("b", "y")))
    assert env.overlay.visible
    env.windows.activate("W2")
    assert run.current_step.id == "a"
    assert env.overlay.visible
    assert env.overlay.anchor_id == "x"


def test_none_policy_keeps_hidden_overlay_hidden(env):
    register_anchors(env.anchors, "W1", "x", transition=Behavior.NONE)
    register_anchors(env.anchors, "W2", "y")
    run = env.start(make_tour(("a", "x"), ("b", "y")))
    env.overlay.hide()
    assert env.windows.activate("W2") is None
    assert run.current_step.id == "a"
    assert not env.overlay.visible


def test_next_previous_hide_walks_back_when_next_is_elsewhere(env):
    env.windows.register_window("W3")
    register_anchors(env.anchors, "W1", "x")
    register_anchors(env.anchors, "W2", "y", transition=Behavior.NEXT_PREVIOUS_HIDE)
    register_anchors(env.anchors, "W3", "z")
    run = env.start(make_tour(("a", "x"), ("b", "y"), ("c", "z")))
    env.windows.activate("W2")
    assert run.current_step.id == "b"
    # the next step lives on W3, so the run falls back to "a" on W1
    assert env.windows.activate("W1") is True
    assert run.current_step.id == "a"
    assert env.overlay.visible
    assert env.overlay.anchor_id == "x"


def test_no_match_hides_overlay(env):
    register_anchors(env.anchors, "W1", "x", "y", transition=Behavior.NEXT_HIDE)
    run = env.start(make_tour(("a", "x"), ("b", "y")))
    assert env.windows.activate("W2") is False
    assert run.current_step.id == "a"
    assert not env.overlay.visible


def test_returning_to_anchor_window_shows_overlay(env):
    register_anchors(env.anchors, "W1", "x", "y", transition=Behavior.NEXT_HIDE)
    env.start(make_tour(("a", "x"), ("b", "y")))
    env.windows.activate("W2")
    assert not env.overlay.visible
    assert env.windows.activate("W1") is True
    assert env.overlay.visible


def test_previous_hide_walks_back_to_nearest_step_on_window(env):
    register_anchors(env.anchors, "W1", "x")
    register_anchors(env.anchors, "W2", "y")
    register_anchors(env.anchors, "W2", "z", transition=Behavior.PREVIOUS_HIDE)
    run = env.start(make_tour(("a", "x"), ("b", "y"), ("c", "z")))
    run.next_step()
    run.next_step()
    env.windows.activate("W2")
    assert run.current_step.id == "c"
    env.windows.activate("W1")
    assert run.current_step.id == "a"
    assert env.overlay.visible
    assert env.overlay.anchor_id == "x"


def test_automatic_follows_dialog_and_back(env):
    register_anchors(env.anchors, "W1", "x", "after")
    register_anchors(env.anchors, "W2", "in-dialog")
    run = env.start(make_tour(("a", "x"), ("b", "in-dialog"), ("c", "after")))
    # W1 opened W2: behaves as NEXT_HIDE
    env.windows.activate("W2")
    assert run.current_step.id == "b"
    # W2 is not an ancestor of W1: behaves as NEXT_PREVIOUS_HIDE, next step c is on W1
    env.windows.activate("W1")
    assert run.current_step.id == "c"


def test_automatic_walks_back_when_next_is_elsewhere(env):
    env.windows.register_window("W3")
    register_anchors(env.anchors, "W1", "x")
    register_anchors(env.anchors, "W2", "in-dialog")
    register_anchors(env.anchors, "W3", "elsewhere")
    run = env.start(make_tour(("a", "x"), ("b", "in-dialog"), ("c", "elsewhere")))
    env.windows.activate("W2")
    assert run.current_step.id == "b"
    env.windows.activate("W1")
    assert run.current_step.id == "a"


def test_activation_of_same_window_is_ignored(env):
    register_anchors(env.anchors, "W1", "x", "y")
    run = env.start(make_tour(("a", "x"), ("b", "y")))
    env.windows.activate("W1")
    assert run.current_step.id == "a"
    assert env.overlay.visible


def test_unresolved_current_anchor_does_nothing(env, caplog):
    register_anchors(env.anchors, "W1", "x", transition=Behavior.NEXT_HIDE)
    register_anchors(env.anchors, "W2", "y")
    run = env.start(make_tour(("a", "x"), ("b", "y")))
    env.anchors.unregister("x")
    with caplog.at_level(logging.WARNING):
        assert env.windows.activate("W2") is None
    assert run.current_step.id == "a"
    assert any("is gone" in r.getMessage() for r in caplog.records)


def test_activation_during_hook_is_handled_after_transition(env):
    register_anchors(env.anchors, "W1", "x", transition=Behavior.NEXT_HIDE)
    register_anchors(env.anchors, "W2", "y")
    # the "entered" hook of the first step opens a dialog
    env.navigator.on_step_entered("a").execute(lambda s: env.windows.activate("W2"))
    run = env.start(make_tour(("a", "x"), ("b", "y")))
    assert run.current_step.id == "b"
    assert env.overlay.visible
    assert env.overlay.anchor_id == "y"


def test_deactivation_hides_overlay_without_changing_step(env):
    register_anchors(env.anchors, "W1", "x")
    run = env.start(make_tour(("a", "x")))
    assert env.windows.deactivate("W1") is False
    assert not env.overlay.visible
    assert run.current_step.id == "a"
    assert run.is_active


def test_closed_run_ignores_window_changes(env):
    register_anchors(env.anchors, "W1", "x", transition=Behavior.NEXT_HIDE)
    register_anchors(env.anchors, "W2", "y")
    run = env.start(make_tour(("a", "x"), ("b", "y")))
    run.close()
    env.windows.activate("W2")
    assert run.current_step.id == "a"
