"""
MonoBehaviour property editing for Unity prefab files.

The prefab text is the only state: components are re-derived from it on
every read and edits are spliced into it directly, so bytes the editor does
not touch are never reformatted.
"""

import re
from typing import Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field


MONOBEHAVIOUR_TYPE = "114"
MONOBEHAVIOUR_MARKER = "MonoBehaviour:"

DOCUMENT_SEPARATOR_PATTERN = re.compile(r"^---\s", re.MULTILINE)
HEADER_PATTERN = re.compile(r"^!u!(\d+) &(\d+)\r?\n(.*)", re.DOTALL)
SCRIPT_GUID_PATTERN = re.compile(r"m_Script: \{fileID: \d+, guid: ([a-fA-F0-9]+), type: 3\}")
PROPERTY_PATTERN = re.compile(r"^ {2}(\w+): (.+)$")


class PrefabComponent(BaseModel):
    """View of one MonoBehaviour document inside a prefab."""

    model_config = ConfigDict(frozen=True)

    file_id: str = Field(..., description="Local fileID of the component")
    unity_type: str = Field(..., description="Unity class tag ('114' = MonoBehaviour)")
    script_guid: Optional[str] = Field(None, description="GUID of the component's script")
    properties: Dict[str, str] = Field(default_factory=dict, description="Top-level scalar properties")
    raw_yaml: str = Field(..., description="Exact document text this view was parsed from")


def parse_components(yaml_content: str) -> List[PrefabComponent]:
    """Parse the MonoBehaviour components of a prefab document.

    Only properties indented by exactly two spaces and written on one line
    are captured.

    Args:
        yaml_content: Prefab text

    Returns:
        Components in document order
    """
    components = []
    for doc in DOCUMENT_SEPARATOR_PATTERN.split(yaml_content):
        if not doc.strip():
            continue

        header = HEADER_PATTERN.match(doc)
        if header is None:
            continue
        unity_type, file_id, content = header.groups()
        if unity_type != MONOBEHAVIOUR_TYPE or MONOBEHAVIOUR_MARKER not in content:
            continue

        script_match = SCRIPT_GUID_PATTERN.search(content)

        properties: Dict[str, str] = {}
        inside = False
        for line in re.split(r"\r?\n", content):
            if MONOBEHAVIOUR_MARKER in line:
                inside = True
                continue
            if not inside:
                continue
            prop = PROPERTY_PATTERN.match(line)
            if prop:
                properties[prop.group(1)] = prop.group(2).strip()

        components.append(PrefabComponent(
            file_id=file_id,
            unity_type=unity_type,
            script_guid=script_match.group(1) if script_match else None,
            properties=properties,
            raw_yaml=doc,
        ))
    return components


def update_properties(yaml_content: str, new_properties: Mapping[str, str]) -> str:
    """Replace the values of existing `key: value` lines.

    For each key, only the first matching line is changed and only its value
    is replaced. Keys without a matching line are ignored.
    """
    updated = yaml_content
    for key, value in new_properties.items():
        pattern = re.compile(rf"^([ \t]+{re.escape(key)}:)[ \t]*([^\r\n]*)", re.MULTILINE)
        match = pattern.search(updated)
        if match is None:
            continue
        updated = updated[:match.start()] + f"{match.group(1)} {value}" + updated[match.end():]
    return updated


class UnityPrefab:
    """Editor for MonoBehaviour properties of a prefab."""

    def __init__(self, yaml_content: str):
        self._yaml = yaml_content

    @property
    def components(self) -> List[PrefabComponent]:
        """All MonoBehaviour components, parsed fresh from the current text."""
        return parse_components(self._yaml)

    def find_components_by_script_guid(self, script_guid: str) -> List[PrefabComponent]:
        return [c for c in self.components if c.script_guid == script_guid]

    def update_component_properties(self, script_guid: str, new_properties: Mapping[str, str]) -> None:
        """Set property values on every component using the given script.

        Args:
            script_guid: GUID of the target script
            new_properties: Property name -> new value text
        """
        for component in self.find_components_by_script_guid(script_guid):
            updated = update_properties(component.raw_yaml, new_properties)
            if updated != component.raw_yaml:
                self._yaml = self._yaml.replace(component.raw_yaml, updated, 1)

    def export_to_yaml(self) -> str:
        return self._yaml
