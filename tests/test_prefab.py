"""Tests for UnityPrefab MonoBehaviour property editing."""

import pytest

from unitypackage import PrefabComponent, UnityPrefab
from unitypackage.prefab import parse_components, update_properties

from conftest import OTHER_SCRIPT_GUID, SCRIPT_GUID


@pytest.fixture
def prefab(prefab_yaml) -> UnityPrefab:
    return UnityPrefab(prefab_yaml)


class TestParseComponents:
    """Test deriving component views from prefab text."""

    def test_only_monobehaviours(self, prefab):
        """Test that GameObject and Transform documents are skipped."""
        components = prefab.components

        assert [c.file_id for c in components] == ["3295622845107614388", "3295622845107614389"]
        assert all(c.unity_type == "114" for c in components)

    def test_script_guid(self, prefab):
        assert [c.script_guid for c in prefab.components] == [SCRIPT_GUID, OTHER_SCRIPT_GUID]

    def test_top_level_properties(self, prefab):
        props = prefab.components[0].properties

        assert props["m_ObjectHideFlags"] == "0"
        assert props["m_Enabled"] == "1"
        assert props["speed"] == "2.5"
        assert props["label"] == "Hello"
        assert props["target"] == "{fileID: 0}"

    def test_skipped_properties(self, prefab):
        """Test that empty values, block values and nested keys are not captured."""
        props = prefab.components[0].properties

        assert "m_Name" not in props
        assert "waypoints" not in props
        assert "settings" not in props
        assert props["speed"] == "2.5"

    def test_raw_yaml_is_exact_slice(self, prefab_yaml, prefab):
        for component in prefab.components:
            assert component.raw_yaml in prefab_yaml
            assert component.raw_yaml.startswith(f"!u!114 &{component.file_id}\nMonoBehaviour:\n")

    def test_components_are_frozen(self, prefab):
        component = prefab.components[0]
        with pytest.raises(ValueError):
            component.file_id = "1"

    def test_missing_script_reference(self):
        text = "--- !u!114 &42\nMonoBehaviour:\n  m_Enabled: 1\n"

        components = parse_components(text)

        assert len(components) == 1
        assert components[0].script_guid is None
        assert components[0].properties == {"m_Enabled": "1"}

    def test_crlf_line_endings(self, prefab_yaml):
        components = parse_components(prefab_yaml.replace("\n", "\r\n"))

        assert [c.script_guid for c in components] == [SCRIPT_GUID, OTHER_SCRIPT_GUID]
        assert components[1].properties["speed"] == "7"

    def test_empty_text(self):
        assert parse_components("") == []

    def test_find_by_script_guid(self, prefab):
        found = prefab.find_components_by_script_guid(OTHER_SCRIPT_GUID)

        assert len(found) == 1
        assert isinstance(found[0], PrefabComponent)
        assert found[0].properties["speed"] == "7"
        assert prefab.find_components_by_script_guid("f" * 32) == []


class TestUpdateProperties:
    """Test splicing new values into prefab text."""

    def test_only_target_value_changes(self, prefab_yaml, prefab):
        """Test that every byte other than the edited value is unchanged."""
        prefab.update_component_properties(SCRIPT_GUID, {"speed": "4"})

        expected = prefab_yaml.replace("  speed: 2.5\n", "  speed: 4\n", 1)
        assert prefab.export_to_yaml() == expected

    def test_other_component_untouched(self, prefab):
        prefab.update_component_properties(SCRIPT_GUID, {"speed": "4"})

        assert prefab.find_components_by_script_guid(SCRIPT_GUID)[0].properties["speed"] == "4"
        assert prefab.find_components_by_script_guid(OTHER_SCRIPT_GUID)[0].properties["speed"] == "7"

    def test_nested_key_untouched(self, prefab):
        prefab.update_component_properties(SCRIPT_GUID, {"speed": "4"})

        assert "  settings:\n    speed: 9\n" in prefab.export_to_yaml()

    def test_multiple_properties(self, prefab_yaml, prefab):
        prefab.update_component_properties(SCRIPT_GUID, {"label": "World", "m_Enabled": "0"})

        props = prefab.find_components_by_script_guid(SCRIPT_GUID)[0].properties
        assert props["label"] == "World"
        assert props["m_Enabled"] == "0"
        assert prefab.find_components_by_script_guid(OTHER_SCRIPT_GUID)[0].properties["m_Enabled"] == "1"

    def test_empty_value_filled(self, prefab):
        """Test that a key with an empty value gets the new value on the same line."""
        prefab.update_component_properties(SCRIPT_GUID, {"m_Name": "Mover"})

        text = prefab.export_to_yaml()
        assert "  m_Name: Mover\n  m_EditorClassIdentifier: \n" in text
        assert prefab.find_components_by_script_guid(SCRIPT_GUID)[0].properties["m_Name"] == "Mover"

    def test_missing_key_ignored(self, prefab_yaml, prefab):
        prefab.update_component_properties(SCRIPT_GUID, {"notAProperty": "1"})

        assert prefab.export_to_yaml() == prefab_yaml

    def test_unknown_script_is_noop(self, prefab_yaml, prefab):
        prefab.update_component_properties("f" * 32, {"speed": "4"})

        assert prefab.export_to_yaml() == prefab_yaml

    def test_export_without_edits_is_verbatim(self, prefab_yaml, prefab):
        assert prefab.export_to_yaml() == prefab_yaml

    def test_repeated_updates(self, prefab):
        """Test that views are re-derived after each edit."""
        prefab.update_component_properties(SCRIPT_GUID, {"speed": "4"})
        prefab.update_component_properties(SCRIPT_GUID, {"speed": "5"})

        assert prefab.find_components_by_script_guid(SCRIPT_GUID)[0].properties["speed"] == "5"
        assert prefab.export_to_yaml().count("  speed: 2.5\n") == 0

    def test_update_properties_first_match_only(self):
        text = "MonoBehaviour:\n  speed: 1\n  speed: 2\n"

        assert update_properties(text, {"speed": "3"}) == "MonoBehaviour:\n  speed: 3\n  speed: 2\n"

    def test_update_properties_keeps_crlf(self):
        text = "MonoBehaviour:\r\n  speed: 1\r\n  label: a\r\n"

        assert update_properties(text, {"speed": "3"}) == "MonoBehaviour:\r\n  speed: 3\r\n  label: a\r\n"
