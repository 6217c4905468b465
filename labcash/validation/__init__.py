"""Form validation package."""

from labcash.validation.validator import RecordValidator

__all__ = ["RecordValidator"]
