"""
Budget Kernel

Domain model, typed errors and structured logging for quote pricing:
- Immutable, self-validating budget inputs
- Decimal-only monetary values
- Typed exceptions with machine-readable codes
"""

__version__ = "0.1.0"
