"""
budget_config -- budget documents and engine settings.

Responsibility:
    Turns stored budget documents (JSON/YAML, the quote editor's import and
    export format) into ``BudgetSnapshot`` objects and reads the ``pricing``
    settings section into ``EngineSettings``.

Architecture position:
    Configuration -- sits above ``budget_kernel``.  The engines MUST NEVER
    import from ``budget_config``; callers parse here and hand the typed
    result to the engines.
"""

from budget_config.loader import (
    load_budget,
    load_settings,
    load_yaml_file,
    parse_activity,
    parse_budget,
    parse_discount,
    parse_margin,
    parse_settings,
)

__all__ = [
    "load_budget",
    "load_settings",
    "load_yaml_file",
    "parse_activity",
    "parse_budget",
    "parse_discount",
    "parse_margin",
    "parse_settings",
]
