"""Input validation package."""

from fairsplit.validation.sanitizer import InputSanitizer, SanitizedInput, sanitize

__all__ = ["InputSanitizer", "SanitizedInput", "sanitize"]
