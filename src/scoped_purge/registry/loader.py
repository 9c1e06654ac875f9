"""
Catalog loader - builds an EntityGraph from YAML or dict declarations.

Expected structure:

    entities:
      - name: members
        key_column: id
        key_kind: identifier
      - name: visits
        key_column: id
        depends_on: [members]
    scopes:
      members: [members, visits]
      all: "*"
"""

from pathlib import Path
from typing import Any

import pydantic
import yaml
from pydantic import BaseModel, Field

from scoped_purge.core.exceptions import ConfigurationError
from scoped_purge.core.models import Entity, KeyColumnKind
from scoped_purge.registry.graph import ALL_ENTITIES, EntityGraph, RegistryBuilder


class EntitySpec(BaseModel):
    """One entity declaration in a catalog file."""

    name: str
    key_column: str = "id"
    key_kind: KeyColumnKind = KeyColumnKind.IDENTIFIER
    protected: bool = False
    depends_on: list[str] = Field(default_factory=list)

    model_config = {"extra": "forbid"}


class ScopeSpec(BaseModel):
    """Long-form scope declaration (short form is a plain list)."""

    entities: list[str] | str
    description: str = ""

    model_config = {"extra": "forbid"}


class CatalogSpec(BaseModel):
    """Whole catalog file."""

    entities: list[EntitySpec]
    scopes: dict[str, list[str] | str | ScopeSpec] = Field(default_factory=dict)

    model_config = {"extra": "forbid"}


def load_catalog_from_dict(data: Any, source: str | None = None) -> EntityGraph:
    """
    Validate a catalog mapping and build the graph.

    Raises:
        ConfigurationError: If the structure is invalid
        UnknownEntityError: If a dependency or scope names an unknown entity
    """
    if not isinstance(data, dict):
        raise ConfigurationError(
            "Catalog must be a mapping with 'entities' and 'scopes'",
            config_file=source,
        )

    try:
        spec = CatalogSpec.model_validate(data)
    except pydantic.ValidationError as e:
        errors = [
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        ]
        raise ConfigurationError(
            "Invalid catalog definition",
            config_file=source,
            details={"validation_errors": errors},
        ) from e

    builder = RegistryBuilder()
    for entity_spec in spec.entities:
        entity = Entity(
            name=entity_spec.name,
            key_column=entity_spec.key_column,
            key_kind=entity_spec.key_kind,
            protected=entity_spec.protected,
        )
        builder.register(entity, depends_on=entity_spec.depends_on)

    for scope_name, scope_spec in spec.scopes.items():
        if isinstance(scope_spec, ScopeSpec):
            builder.add_scope(scope_name, scope_spec.entities, scope_spec.description)
        else:
            builder.add_scope(scope_name, scope_spec)

    return builder.build()


def load_catalog_from_yaml(path: Path) -> EntityGraph:
    """
    Load a catalog from a YAML file.

    Raises:
        ConfigurationError: If the file is missing or not valid YAML
    """
    path = Path(path)
    if not path.exists():
        raise ConfigurationError(
            f"Catalog file not found: {path}",
            config_file=str(path),
        )

    try:
        data = yaml.safe_load(path.read_text())
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"Invalid YAML in catalog file: {e}",
            config_file=str(path),
        ) from e

    return load_catalog_from_dict(data, source=str(path))


def dump_catalog(graph: EntityGraph) -> dict[str, Any]:
    """Render a graph back into the catalog mapping format."""
    all_names = [e.name for e in graph.entities if not e.protected]
    scopes: dict[str, Any] = {}
    for name, scope in graph.scopes.items():
        members: list[str] | str = list(scope.entity_names)
        if members == all_names:
            members = ALL_ENTITIES
        if scope.description:
            scopes[name] = {"entities": members, "description": scope.description}
        else:
            scopes[name] = members

    return {
        "entities": [
            {
                "name": e.name,
                "key_column": e.key_column,
                "key_kind": e.key_kind.value,
                "protected": e.protected,
                "depends_on": list(graph.parents_of(e.name)),
            }
            for e in graph.entities
        ],
        "scopes": scopes,
    }
