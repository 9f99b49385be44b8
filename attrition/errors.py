"""Exceptions and warnings raised by the attrition analysis."""


class AttritionError(Exception):
    """Base class for fatal analysis errors."""


class SchemaError(AttritionError):
    """The input table is missing expected columns or label values."""

    def __init__(self, missing, message=None):
        self.missing = sorted(missing)
        super().__init__(message or f"Missing required columns: {', '.join(self.missing)}")


class InsufficientDataError(AttritionError):
    """A label stratum is too small to be split."""

    def __init__(self, strata, message=None):
        self.strata = dict(strata)
        detail = ", ".join(f"{k}={v}" for k, v in self.strata.items())
        super().__init__(message or f"Cannot stratify split, stratum sizes: {detail}")


class ZeroVarianceWarning(UserWarning):
    """An attribute carries no variance where a model needs some."""
