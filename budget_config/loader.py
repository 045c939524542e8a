"""
Budget Loader (``budget_config.loader``).

Responsibility
--------------
Parses budget documents and engine settings into typed
``budget_kernel.domain`` value objects.  A budget document is the JSON
configuration the quote editor imports and exports (camelCase keys)::

    {
      "budgetName": "Sito web",
      "currency": "€",
      "defaultVat": 22,
      "resources": [{"id": "res_1", "name": "Dev", "costType": "hourly",
                     "pricePerHour": 50}],
      "activities": [{"id": "act_1", "name": "Sviluppo", "vat": 22,
                      "resources": [{"resourceId": "res_1", "hours": 10,
                                     "fixedPrice": 0}]}],
      "generalDiscount": {"enabled": false, "type": "percentage",
                          "value": 0, "applyOn": "taxable"},
      "generalMargin": {"enabled": false, "value": 0}
    }

YAML files with the same shape are accepted too (``yaml.safe_load`` reads
JSON as well).

Architecture position
---------------------
**Config layer** -- ingestion tooling.  Sits above ``budget_kernel``; the
engines never import it.

Invariants enforced
-------------------
* Missing required keys raise ``BudgetConfigError`` naming the key; no
  silent defaults for required fields.
* Invalid values (negative hours, unknown cost types, ...) raise
  ``InvalidInputError`` from the domain constructors.
* Numbers are converted to ``Decimal`` through ``str()``, never through
  binary floats.

Failure modes
-------------
* Missing file  -> ``FileNotFoundError`` propagates.
* Malformed YAML/JSON  -> ``yaml.YAMLError`` propagates.
"""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Any

import yaml

from budget_kernel.domain.budget import (
    Activity,
    BudgetSnapshot,
    DiscountPolicy,
    GeneralMargin,
    MarginBase,
    Resource,
    ResourceAssignment,
    ResourceCatalog,
    to_decimal,
)
from budget_kernel.domain.settings import (
    EngineSettings,
    NegativeAmountPolicy,
    UnresolvedResourcePolicy,
)
from budget_kernel.exceptions import BudgetConfigError
from budget_kernel.logging_config import LogContext, get_logger

logger = get_logger("config.loader")

_DEFAULT_VAT = "22"


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML (or JSON) file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        BudgetConfigError: if the document is not a mapping.
    """
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise BudgetConfigError("<root>", "document must be a mapping", str(path))
    return data


def _require(data: dict[str, Any], key: str, context: str, source: str | None) -> Any:
    if key not in data:
        raise BudgetConfigError(f"{context}.{key}" if context else key,
                                "missing required key", source)
    return data[key]


def _require_list(data: dict[str, Any], key: str, context: str, source: str | None) -> list:
    value = _require(data, key, context, source)
    if not isinstance(value, list):
        name = f"{context}.{key}" if context else key
        raise BudgetConfigError(name, "must be a list", source)
    return value


def parse_date(value: Any) -> date | None:
    """
    Parse an optional date (string or date object).

    Raises:
        ValueError: if ``value`` is not a valid date representation.
    """
    if value in (None, ""):
        return None
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        # Editors store full ISO timestamps; only the date part matters
        return date.fromisoformat(value[:10])
    raise ValueError(f"Cannot parse date from {value!r}")


def parse_resource(data: dict[str, Any], source: str | None = None) -> Resource:
    """Parse a Resource from a dict."""
    return Resource(
        id=str(_require(data, "id", "resource", source)),
        name=data.get("name", ""),
        cost_type=_require(data, "costType", "resource", source),
        price_per_hour=data.get("pricePerHour", 0),
    )


def parse_assignment(data: dict[str, Any], source: str | None = None) -> ResourceAssignment:
    """Parse a ResourceAssignment from a dict."""
    return ResourceAssignment(
        resource_id=str(_require(data, "resourceId", "assignment", source)),
        hours=data.get("hours", 0),
        fixed_price=data.get("fixedPrice", 0),
    )


def parse_discount(data: dict[str, Any] | None) -> DiscountPolicy | None:
    """Parse an activity or general discount; None stays None."""
    if data is None:
        return None
    return DiscountPolicy(
        enabled=bool(data.get("enabled", False)),
        type=data.get("type", "percentage"),
        value=data.get("value", 0),
        apply_on=data.get("applyOn", "taxable"),
    )


def parse_margin(data: dict[str, Any] | None) -> GeneralMargin | None:
    """Parse the general margin; None stays None."""
    if data is None:
        return None
    return GeneralMargin(
        enabled=bool(data.get("enabled", False)),
        type=data.get("type", "percentage"),
        value=data.get("value", 0),
        apply_on=data.get("applyOn", MarginBase.BEFORE_DISCOUNT),
    )


def parse_activity(
    data: dict[str, Any],
    default_vat: Any = _DEFAULT_VAT,
    source: str | None = None,
) -> Activity:
    """Parse an Activity; ``vat`` falls back to the budget's default VAT."""
    activity_id = str(_require(data, "id", "activity", source))
    assignments = data.get("resources") or []
    return Activity(
        id=activity_id,
        name=data.get("name", ""),
        description=data.get("description", ""),
        resources=tuple(parse_assignment(a, source) for a in assignments),
        vat=data.get("vat", default_vat),
        discount=parse_discount(data.get("discount")),
        start_date=parse_date(data.get("startDate")),
        end_date=parse_date(data.get("endDate")),
    )


def parse_budget(data: dict[str, Any], source: str | None = None) -> BudgetSnapshot:
    """
    Parse a budget document into a BudgetSnapshot.

    Preconditions:
        ``data`` contains ``currency``, ``resources`` and ``activities``.
    Raises:
        BudgetConfigError: on missing keys or wrongly shaped sections.
        InvalidInputError: on invalid values.
    """
    currency = _require(data, "currency", "", source)
    default_vat = to_decimal(data.get("defaultVat", _DEFAULT_VAT), "budget.default_vat")
    resources = _require_list(data, "resources", "", source)
    activities = _require_list(data, "activities", "", source)

    snapshot = BudgetSnapshot(
        catalog=ResourceCatalog(parse_resource(r, source) for r in resources),
        activities=tuple(parse_activity(a, default_vat, source) for a in activities),
        general_discount=parse_discount(data.get("generalDiscount")) or DiscountPolicy(),
        general_margin=parse_margin(data.get("generalMargin")),
        currency=str(currency),
        name=data.get("budgetName", ""),
        default_vat=default_vat,
    )

    logger.info("budget_parsed", extra={
        "source": source,
        "budget_name": snapshot.name,
        "resource_count": len(snapshot.catalog),
        "activity_count": len(snapshot.activities),
    })
    return snapshot


def load_budget(path: Path | str) -> BudgetSnapshot:
    """Load and parse a budget document from a YAML or JSON file."""
    path = Path(path)
    with LogContext.bind(budget_source=str(path)):
        return parse_budget(load_yaml_file(path), source=str(path))


# ---------------------------------------------------------------------------
# Engine settings
# ---------------------------------------------------------------------------

_SETTINGS_KEYS = frozenset({"on_unresolved_resource", "negative_amounts", "strict_percentages"})


def parse_settings(data: dict[str, Any] | None, source: str | None = None) -> EngineSettings:
    """
    Parse the ``pricing`` settings section.

    Absent keys take the engine defaults; unknown keys and values are
    rejected so a typo never silently changes how quotes are priced.
    """
    if not data:
        return EngineSettings()

    unknown = set(data) - _SETTINGS_KEYS
    if unknown:
        raise BudgetConfigError(f"pricing.{sorted(unknown)[0]}", "unknown setting", source)

    try:
        on_unresolved = UnresolvedResourcePolicy(data.get("on_unresolved_resource", "abort"))
    except ValueError as e:
        raise BudgetConfigError(
            "pricing.on_unresolved_resource", str(e), source
        ) from e
    try:
        negative = NegativeAmountPolicy(data.get("negative_amounts", "allow"))
    except ValueError as e:
        raise BudgetConfigError("pricing.negative_amounts", str(e), source) from e

    strict = data.get("strict_percentages", False)
    if not isinstance(strict, bool):
        raise BudgetConfigError("pricing.strict_percentages", "must be a boolean", source)

    return EngineSettings(
        on_unresolved_resource=on_unresolved,
        negative_amounts=negative,
        strict_percentages=strict,
    )


def load_settings(path: Path | str) -> EngineSettings:
    """Load engine settings from the ``pricing:`` section of a YAML file."""
    path = Path(path)
    data = load_yaml_file(path)
    section = data.get("pricing")
    if section is not None and not isinstance(section, dict):
        raise BudgetConfigError("pricing", "must be a mapping", str(path))
    settings = parse_settings(section, source=str(path))
    logger.info("engine_settings_loaded", extra={
        "source": str(path),
        "on_unresolved_resource": settings.on_unresolved_resource.value,
        "negative_amounts": settings.negative_amounts.value,
        "strict_percentages": settings.strict_percentages,
    })
    return settings
