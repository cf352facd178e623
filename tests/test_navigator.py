from featuretour.navigation import (
    FeatureTour,
    HookCategory,
    NullTourDoable,
    NullTourExecution,
    NullTourNavigator,
    TourContext,
    get_tour_context,
    reset_tour_context,
)
from featuretour.navigation.navigator import TourNavigator
from featuretour.services.action_repository import ReleaseHandle
from featuretour.services.service_locator import services
from tests.factories import make_tour, register_anchors


def test_default_context_is_registered_lazily():
    ctx = get_tour_context()
    assert services.try_get("tour_context") is ctx
    assert get_tour_context() is ctx
    assert FeatureTour.get_navigator().context is ctx


def test_reset_replaces_default_context():
    first = get_tour_context()
    second = reset_tour_context()
    assert first is not second
    assert get_tour_context() is second


def test_empty_step_id_yields_null_objects():
    nav = FeatureTour.get_navigator(TourContext())
    assert isinstance(nav.on_step_entering(""), NullTourExecution)
    assert isinstance(nav.on_step_entered(None), NullTourExecution)
    assert isinstance(nav.for_step(""), NullTourDoable)
    assert nav.on_step_left("").execute(lambda s: None) is ReleaseHandle.EMPTY
    assert nav.for_step(None).attach_doable(lambda s: None) is ReleaseHandle.EMPTY


def test_hooks_are_keyed_by_step_and_category():
    ctx = TourContext()
    nav = FeatureTour.get_navigator(ctx)
    nav.on_step_entering("a").execute(lambda s: None)
    nav.on_closed().execute(lambda s: None)
    assert ctx.hooks.contains(("a", HookCategory.ENTERING))
    assert not ctx.hooks.contains(("a", HookCategory.ENTERED))
    assert ctx.hooks.contains((None, HookCategory.CLOSED))


def test_released_hook_is_not_fired():
    ctx = TourContext()
    nav = FeatureTour.get_navigator(ctx)
    calls = []
    handle = nav.on_step_entered("a").execute(calls.append)
    handle.release()
    ctx.fire_entered(make_tour(("a", "x")).steps[0])
    assert calls == []


def test_doable_without_guard_is_always_enabled():
    ctx = TourContext()
    nav = FeatureTour.get_navigator(ctx)
    done = []
    nav.for_step("a").attach_doable(done.append)
    step = make_tour(("a", "x")).steps[0]
    assert ctx.has_doable(step)
    assert ctx.can_do(step)
    ctx.do(step)
    assert done == [step]


def test_doable_guard_is_consulted():
    ctx = TourContext()
    nav = FeatureTour.get_navigator(ctx)
    nav.for_step("a").attach_doable(lambda s: None, can_do=lambda s: False)
    assert not ctx.can_do(make_tour(("a", "x")).steps[0])


def test_if_current_step_equals_without_run_is_null():
    nav = FeatureTour.get_navigator(TourContext())
    navigator = nav.if_current_step_equals("a")
    assert isinstance(navigator, NullTourNavigator)
    assert navigator.go_next() is False
    assert navigator.go_previous() is False
    navigator.close()
    assert nav.close() is False


def test_if_current_step_equals_matches_current_step(env):
    register_anchors(env.anchors, "W1", "x", "y")
    run = env.start(make_tour(("a", "x"), ("b", "y")))
    nav = env.navigator
    assert isinstance(nav.if_current_step_equals("b"), NullTourNavigator)
    live = nav.if_current_step_equals("a")
    assert type(live) is TourNavigator
    assert live.go_next() is True
    assert run.current_step.id == "b"
    assert nav.current_step.id == "b"
    assert nav.if_current_step_equals("b").go_previous() is True
    assert run.current_step.id == "a"


def test_facade_close_closes_current_run(env):
    register_anchors(env.anchors, "W1", "x")
    run = env.start(make_tour(("a", "x")))
    assert env.navigator.close() is True
    assert not run.is_active
    assert env.context.current_run is None
    assert env.navigator.close() is False
