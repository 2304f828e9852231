"""
Tests for roles and the role hierarchy.
"""

import pytest

from gatekeeper.errors import ConfigurationError
from gatekeeper.role import Role, RoleHierarchy, normalize_role_names, normalize_roles


def names(roles):
    return [role.name for role in roles]


class TestRole:
    """Test the role value type"""

    def test_equality_by_name(self):
        assert Role("ROLE_ADMIN") == Role("ROLE_ADMIN")
        assert Role("ROLE_ADMIN") != Role("ROLE_USER")
        assert len({Role("ROLE_ADMIN"), Role("ROLE_ADMIN")}) == 1

    def test_immutable(self):
        role = Role("ROLE_ADMIN")
        with pytest.raises(AttributeError):
            role.name = "ROLE_USER"

    def test_empty_name_rejected(self):
        with pytest.raises(ConfigurationError):
            Role("")

    def test_normalize_scalar_and_list(self):
        assert normalize_role_names("ROLE_USER") == ["ROLE_USER"]
        assert normalize_role_names(["ROLE_A", "ROLE_B"]) == ["ROLE_A", "ROLE_B"]
        assert normalize_role_names(None) == []
        assert normalize_roles(("ROLE_A", Role("ROLE_B"))) == [Role("ROLE_A"), Role("ROLE_B")]

    @pytest.mark.parametrize("value", [5, {"a": "b"}, ["ROLE_A", 3], [""], ""])
    def test_normalize_rejects_malformed_values(self, value):
        with pytest.raises(ConfigurationError):
            normalize_role_names(value, config_key="Roles")


class TestRoleHierarchy:
    """Test flattening of the role hierarchy"""

    def test_transitive_closure(self):
        hierarchy = RoleHierarchy({"admin": ["editor"], "editor": ["viewer"]})

        roles = hierarchy.get_accessible_roles([Role("admin")])

        assert names(roles) == ["admin", "editor", "viewer"]

    def test_cycle_terminates(self):
        hierarchy = RoleHierarchy({"a": ["b"], "b": ["a"]})

        roles = hierarchy.get_accessible_roles([Role("a")])

        assert set(names(roles)) == {"a", "b"}
        assert len(roles) == 2

    def test_self_reference(self):
        hierarchy = RoleHierarchy({"a": ["a", "b"]})

        assert names(hierarchy.get_accessible_roles([Role("a")])) == ["a", "b"]

    def test_scalar_value_coerced(self):
        hierarchy = RoleHierarchy({"ROLE_ADMIN": "ROLE_USER"})

        assert hierarchy.get_implied_role_names("ROLE_ADMIN") == ["ROLE_USER"]

    def test_discovery_order(self):
        hierarchy = RoleHierarchy({"m": ["x", "y"], "x": ["z"], "y": ["w"]})

        assert names(hierarchy.get_accessible_roles([Role("m")])) == ["m", "x", "y", "z", "w"]

    def test_shared_descendant_expanded_once(self):
        hierarchy = RoleHierarchy({"m": ["x", "y"], "x": ["z"], "y": ["z"], "z": ["q"]})

        assert hierarchy.get_implied_role_names("m") == ["x", "y", "z", "q"]

    def test_input_roles_come_first(self):
        hierarchy = RoleHierarchy({"admin": ["editor"], "editor": ["viewer"]})

        roles = hierarchy.get_accessible_roles([Role("editor"), Role("admin")])

        assert names(roles) == ["editor", "admin", "viewer"]

    def test_role_without_entry(self):
        hierarchy = RoleHierarchy({"admin": ["editor"]})

        assert names(hierarchy.get_accessible_roles([Role("guest")])) == ["guest"]
        assert "guest" not in hierarchy

    def test_empty_hierarchy(self):
        hierarchy = RoleHierarchy()

        assert len(hierarchy) == 0
        assert hierarchy.get_accessible_roles([]) == []

    def test_map_is_a_copy(self):
        hierarchy = RoleHierarchy({"admin": ["editor"], "editor": ["viewer"]})

        snapshot = hierarchy.to_dict()
        snapshot["admin"].append("root")

        assert hierarchy.to_dict() == {"admin": ["editor", "viewer"], "editor": ["viewer"]}

    @pytest.mark.parametrize("config", [
        ["admin"],
        {"admin": 5},
        {"admin": ["editor", None]},
        {1: ["editor"]},
    ])
    def test_malformed_configuration(self, config):
        with pytest.raises(ConfigurationError):
            RoleHierarchy(config)
