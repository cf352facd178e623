import pytest

from featuretour.services.service_locator import (
    ServiceAlreadyRegisteredError,
    ServiceLocator,
    ServiceNotFoundError,
)


def test_register_and_get():
    loc = ServiceLocator()
    loc.register("bus", 123)
    assert loc.get("bus") == 123


def test_duplicate_registration_rejected():
    loc = ServiceLocator()
    loc.register("a", 1)
    with pytest.raises(ServiceAlreadyRegisteredError):
        loc.register("a", 2)
    loc.register("a", 2, allow_override=True)
    assert loc.get("a") == 2


def test_missing_service():
    loc = ServiceLocator()
    with pytest.raises(ServiceNotFoundError):
        loc.get("nope")
    assert loc.try_get("nope", "fallback") == "fallback"


def test_none_is_a_valid_service():
    loc = ServiceLocator()
    loc.register("empty", None)
    assert loc.get("empty") is None


def test_get_or_create_calls_factory_once():
    loc = ServiceLocator()
    created = []

    def factory():
        created.append(object())
        return created[-1]

    first = loc.get_or_create("ctx", factory)
    assert loc.get_or_create("ctx", factory) is first
    assert len(created) == 1


def test_override_restores_previous_state():
    loc = ServiceLocator()
    loc.register("a", 1)
    with loc.override(a=2, b=3):
        assert loc.get("a") == 2
        assert loc.get("b") == 3
    assert loc.get("a") == 1
    assert loc.try_get("b") is None


def test_unregister_and_clear():
    loc = ServiceLocator()
    loc.register("a", 1)
    loc.register("b", 2)
    loc.unregister("a")
    loc.unregister("a")
    assert loc.try_get("a") is None
    assert loc.get("b") == 2
    loc.clear()
    assert loc.try_get("b") is None
