"""Test data factories."""

from tests.factories.token import (
    SpotTokenFactory,
    TokenDetailsFactory,
    TokenRecordFactory,
)

__all__ = ["SpotTokenFactory", "TokenDetailsFactory", "TokenRecordFactory"]
