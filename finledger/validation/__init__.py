"""Boundary validation package."""

from finledger.validation.validator import RecordValidator

__all__ = ["RecordValidator"]
