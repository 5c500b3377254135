"""State validation engine for lesson steps."""

from tutorterm.validation.engine import ValidationEngine, validate_step
from tutorterm.validation.types import (
    CHECK_KINDS,
    CaseWarning,
    CheckDescriptor,
    CheckDescriptorError,
    Verdict,
    parse_check,
)

__all__ = [
    "CHECK_KINDS",
    "CaseWarning",
    "CheckDescriptor",
    "CheckDescriptorError",
    "ValidationEngine",
    "Verdict",
    "parse_check",
    "validate_step",
]
