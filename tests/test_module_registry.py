import pytest

from lifestream.models.enums import Role
from lifestream.ui.module_registry import ModuleRegistry
from lifestream.ui.sidebar import initials, role_caption


def _factory(parent):
    return parent


def _registry(logger):
    registry = ModuleRegistry(logger=logger)
    registry.register("dashboard", "Dashboard", "D", _factory, default=True)
    registry.register("users", "All Users", "U", _factory, frozenset({Role.ADMIN}))
    registry.register("blogs", "Blog", "B", _factory, public=True)
    registry.register("contact", "Contact", "C", _factory, public=True)
    return registry


def test_guests_see_public_screens_only(logger):
    registry = _registry(logger)

    assert [m.module_id for m in registry.visible_modules(None)] == ["blogs", "contact"]
    assert registry.home_for(authenticated=False) == "blogs"


def test_sidebar_follows_role(logger):
    registry = _registry(logger)

    donor = [m.module_id for m in registry.visible_modules(Role.DONOR)]
    admin = [m.module_id for m in registry.visible_modules(Role.ADMIN)]

    assert "users" not in donor
    assert admin[:2] == ["dashboard", "users"]
    assert registry.home_for(authenticated=True) == "dashboard"


def test_unknown_screen_raises_key_error(logger):
    registry = _registry(logger)

    with pytest.raises(KeyError, match="missing"):
        registry.get("missing")


def test_navigate_goes_through_bound_shell(logger):
    registry = _registry(logger)
    opened = []

    registry.navigate("blogs")
    registry.bind_navigator(opened.append)
    registry.navigate("contact")

    assert opened == ["contact"]


@pytest.mark.parametrize(
    "name, expected",
    [("Dana Rahman", "DR"), ("karim", "K"), ("Md Abdul  Karim", "MK"), ("   ", "?")],
)
def test_sidebar_initials(name, expected):
    assert initials(name) == expected


def test_role_caption(donor):
    assert role_caption(None) == "Browsing as guest"
    assert role_caption(donor) == "Donor"
    assert role_caption(donor.model_copy(update={"role": None})) == "Role pending"
