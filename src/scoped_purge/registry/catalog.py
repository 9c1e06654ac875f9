"""
Built-in catalog for the church administration data set.

Used when no PURGE_CATALOG_PATH is configured.
"""

from functools import lru_cache
from typing import Any

from scoped_purge.registry.graph import ALL_ENTITIES, EntityGraph
from scoped_purge.registry.loader import load_catalog_from_dict

BUILTIN_CATALOG: dict[str, Any] = {
    "entities": [
        # Tenant-wide configuration, never purged
        {"name": "settings", "key_column": "id", "protected": True},
        {"name": "members", "key_column": "id"},
        {
            "name": "attendance",
            "key_column": "week_num",
            "key_kind": "numeric",
            "depends_on": ["members"],
        },
        # One row per note, no identity column of its own
        {"name": "notes", "key_column": "member_id", "depends_on": ["members"]},
        {"name": "visits", "key_column": "id", "depends_on": ["members"]},
        {"name": "income", "key_column": "id", "depends_on": ["members"]},
        {"name": "expense", "key_column": "id"},
        {"name": "budget", "key_column": "fiscal_year", "key_kind": "compositeString"},
        {"name": "checklist", "key_column": "week_key", "key_kind": "compositeString"},
        {"name": "plans", "key_column": "id"},
        {"name": "sermons", "key_column": "id"},
    ],
    "scopes": {
        "all": {"entities": ALL_ENTITIES, "description": "Full environment reset"},
        "pastoral": {
            "entities": ["attendance", "notes", "members"],
            "description": "Members with their attendance and notes",
        },
        "attendance": {"entities": ["attendance"], "description": "Weekly attendance only"},
        "finance": {
            "entities": ["income", "expense", "budget"],
            "description": "Income, expense and budget ledgers",
        },
        "visits": {"entities": ["visits"], "description": "Pastoral visit records"},
        "planner": {"entities": ["plans"], "description": "Planner entries"},
    },
}


@lru_cache(maxsize=1)
def builtin_graph() -> EntityGraph:
    """Get the built-in entity graph (cached)."""
    return load_catalog_from_dict(BUILTIN_CATALOG, source="builtin")
