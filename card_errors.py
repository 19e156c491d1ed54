# card_errors.py
from __future__ import annotations


class CardinalityError(Exception):
    """Base class for contract violations in the cardinality encoders."""


class EmptyInputError(CardinalityError, ValueError):
    def __init__(self, what: str = "totalizer"):
        super().__init__(f"Cannot build {what} over an empty literal set.")


class InvalidBoundError(CardinalityError, ValueError):
    pass


class UnregisteredProviderError(CardinalityError, RuntimeError):
    pass


class DetachedConstraintError(CardinalityError, RuntimeError):
    pass
