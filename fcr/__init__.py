"""Release reconciliation for Function Compute deployment templates."""

__version__ = "0.3.0"
