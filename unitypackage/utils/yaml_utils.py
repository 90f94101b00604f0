"""
YAML helpers using the YAML 1.2 core schema.

PyYAML resolves plain scalars with YAML 1.1 rules, where `on`/`off`/`yes`/`no`
are booleans and a float needs a decimal point. Unity writes `m_Name: Off`
and `value: 1e-05`, so the loader and dumper here only resolve the core
schema: null, `true`/`false`, decimal or hex integers, and floats written
with a decimal point or an exponent. Every other plain scalar stays a string.
"""

import re
from typing import Any

import yaml


NULL_TAG = "tag:yaml.org,2002:null"
BOOL_TAG = "tag:yaml.org,2002:bool"
INT_TAG = "tag:yaml.org,2002:int"
FLOAT_TAG = "tag:yaml.org,2002:float"

CORE_RESOLVERS = (
    (NULL_TAG, re.compile(r"^(?:~|null|Null|NULL|)$"), ["~", "n", "N", ""]),
    (BOOL_TAG, re.compile(r"^(?:true|True|TRUE|false|False|FALSE)$"), list("tTfF")),
    (INT_TAG, re.compile(r"^(?:[-+]?(?:0|[1-9][0-9]*)|0x[0-9a-fA-F]+)$"), list("-+0123456789")),
    (
        FLOAT_TAG,
        re.compile(
            r"^(?:[-+]?(?:\.[0-9]+|[0-9]+\.[0-9]*)(?:[eE][-+]?[0-9]+)?"
            r"|[-+]?[0-9]+[eE][-+]?[0-9]+"
            r"|[-+]?\.(?:inf|Inf|INF)"
            r"|\.(?:nan|NaN|NAN))$"
        ),
        list("-+.0123456789"),
    ),
)


def _install_core_resolvers(cls):
    # Replaces the inherited YAML 1.1 table instead of extending it
    cls.yaml_implicit_resolvers = {}
    for tag, regexp, first in CORE_RESOLVERS:
        cls.add_implicit_resolver(tag, regexp, first)
    return cls


@_install_core_resolvers
class CoreSchemaLoader(yaml.SafeLoader):
    """SafeLoader resolving plain scalars with the YAML 1.2 core schema."""


@_install_core_resolvers
class CoreSchemaDumper(yaml.SafeDumper):
    """SafeDumper that quotes a string only when the core schema would misread it."""


class YamlUtils:
    """Static helpers for loading and dumping YAML with the core schema."""

    @staticmethod
    def load(text: str) -> Any:
        """Parse a single YAML document.

        Raises:
            yaml.YAMLError: If the text is not valid YAML
        """
        return yaml.load(text, Loader=CoreSchemaLoader)

    @staticmethod
    def dump(data: Any, width: int) -> str:
        """Dump in block style, keeping mapping order."""
        return yaml.dump(
            data,
            Dumper=CoreSchemaDumper,
            indent=2,
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True,
            width=width,
        )
