"""
Typed Exception Hierarchy for the Budget Pricing Engine.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

A quote is a financial document: the total printed on it must match what the
engine computed. When the engine cannot compute a total it must say exactly
why, so callers catch by type and read structured attributes instead of
parsing message strings.

Every exception:
  1. Has a TYPED class (catch by type, not message)
  2. Has a CODE class attribute (machine-readable, API-safe)
  3. Carries structured DATA (resource_id, field, value, key, ...)

Example:
    try:
        totals = calculate_quote_totals(catalog, activities, discount)
    except UnresolvedResourceError as e:
        log.warning(f"Resource {e.resource_id} missing from catalog")
        api_response(code=e.code, resource=e.resource_id)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    BudgetEngineError (base)
    |
    +-- PricingError
    |   +-- UnresolvedResourceError
    |   +-- InvalidInputError
    |
    +-- ConfigurationError
        +-- BudgetConfigError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                   | When Raised
----------------|------------------------|---------------------------------------
Pricing         | UNRESOLVED_RESOURCE    | Assignment references unknown resource
                | INVALID_INPUT          | Negative hours/price/VAT/discount/margin
----------------|------------------------|---------------------------------------
Configuration   | BUDGET_CONFIG_INVALID  | Budget or settings document malformed

===============================================================================
HANDLING PATTERNS
===============================================================================

1. NO PARTIAL RESULTS: a PricingError raised anywhere inside a quote
   computation aborts the whole computation. Never display a total computed
   from a subset of activities.

2. DATA-INTEGRITY BUGS ARE NOT RETRIED: UnresolvedResourceError means the
   stored budget references a deleted resource. The engine performs no I/O,
   so there is nothing to retry.
"""


class BudgetEngineError(Exception):
    """
    Base exception for all budget pricing engine errors.

    All subclasses must have a `code` class attribute
    for machine-readable error identification.
    """

    code: str = "BUDGET_ENGINE_ERROR"


# Pricing exceptions


class PricingError(BudgetEngineError):
    """Base exception for errors raised while computing a quote."""

    code: str = "PRICING_ERROR"


class UnresolvedResourceError(PricingError):
    """
    A resource assignment references a resource absent from the catalog.

    Fatal to the computation. The missing id is carried so the caller can
    point the user at the broken assignment.
    """

    code: str = "UNRESOLVED_RESOURCE"

    def __init__(self, resource_id: str, activity_id: str | None = None):
        self.resource_id = resource_id
        self.activity_id = activity_id
        where = f" (activity {activity_id})" if activity_id else ""
        super().__init__(f"Resource not found in catalog: {resource_id}{where}")


class InvalidInputError(PricingError):
    """
    An input value violates a pricing invariant.

    Raised for negative hours, quantities, prices, VAT rates or
    discount/margin values, and for unknown enum values. The engine rejects
    rather than clamps, since a silently clamped input would print a total
    the user never entered.
    """

    code: str = "INVALID_INPUT"

    def __init__(self, field: str, value: object, reason: str):
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid {field}={value!r}: {reason}")


# Configuration exceptions


class ConfigurationError(BudgetEngineError):
    """Base exception for configuration loading errors."""

    code: str = "CONFIGURATION_ERROR"


class BudgetConfigError(ConfigurationError):
    """A budget or settings document is missing a key or holds a bad value."""

    code: str = "BUDGET_CONFIG_INVALID"

    def __init__(self, key: str, reason: str, source: str | None = None):
        self.key = key
        self.reason = reason
        self.source = source
        origin = f" in {source}" if source else ""
        super().__init__(f"Invalid budget configuration{origin}: {key}: {reason}")
