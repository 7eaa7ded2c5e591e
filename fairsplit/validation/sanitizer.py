"""
Numeric Entry Sanitizer

DESIGN DECISION: Field entry is fail-soft.
Whatever the user types, the field ends up holding a valid non-negative
whole number. Nothing here raises:

- Characters other than ASCII digits and the grouping separator are dropped
- Separators are dropped
- Only the first `max_digits` digits are kept; later keystrokes are
  silently discarded, which caps values at 9,999,999 by default
- An empty result means 0

The formatters live here too, because display text must sanitize back to
the same number: sanitize(format_amount(sanitize(x))) == sanitize(x).
"""

import re
from typing import Optional

from pydantic import BaseModel, Field

from fairsplit.config import get_settings
from fairsplit.config.settings import SplitSettings


class SanitizedInput(BaseModel):
    """Outcome of cleaning one keystroke event."""

    value: int = Field(ge=0, description="Number the field now holds")
    digits: str = Field(description="Digit string that produced the value")
    discarded: str = Field(
        default="",
        description="Digits dropped by the length cap"
    )
    changed: bool = Field(
        default=True,
        description="Do the digits differ from what the field held before?"
    )

    @property
    def truncated(self) -> bool:
        return bool(self.discarded)


class InputSanitizer:
    """
    Turns raw field text into numbers and numbers into display text.
    """

    def __init__(self, settings: Optional[SplitSettings] = None):
        self._settings = settings or get_settings().split
        self._separator = self._settings.thousands_separator
        self._max_digits = self._settings.max_digits
        self._strip_pattern = re.compile(f"[^0-9{re.escape(self._separator)}]")

    @property
    def max_digits(self) -> int:
        return self._max_digits

    def clean(self, raw: Optional[str], previous_digits: str = "") -> SanitizedInput:
        """
        Clean raw field text.

        Args:
            raw: Text currently in the field, exactly as typed
            previous_digits: Digit string the field held before this
                    keystroke. Only used to fill `changed`.
        """
        text = raw if isinstance(raw, str) else ""

        kept_chars = self._strip_pattern.sub("", text)
        digits = kept_chars.replace(self._separator, "")

        discarded = digits[self._max_digits:]
        digits = digits[:self._max_digits]

        value = int(digits, 10) if digits else 0

        return SanitizedInput(
            value=value,
            digits=digits,
            discarded=discarded,
            changed=digits != previous_digits,
        )

    def sanitize(self, raw: Optional[str], previous_digits: str = "") -> int:
        """Clean raw field text and return only the resulting number."""
        return self.clean(raw, previous_digits).value

    def digits_of(self, value: float) -> str:
        """Digit string a field holding `value` shows, without separators."""
        return self.format_amount(value).replace(self._separator, "")

    @staticmethod
    def whole_number(value: float) -> int:
        """
        Round a value to the whole number a field can hold.

        Only a hand-edited store can hold fractions; they are rounded
        so the echoed text sanitizes back to the held value.
        """
        return int(round(value))

    def format_amount(self, value: float) -> str:
        """Input echo with grouped digits: 36000 -> "36,000"."""
        return self._group(f"{self.whole_number(value):,}")

    def format_share(self, value: float) -> str:
        """Allocation text in two-decimal fixed point: 3157.894 -> "3,157.89"."""
        return self._group(f"{value:,.2f}")

    @staticmethod
    def format_percent(ratio: float) -> str:
        """Share of total income: 0.6315 -> "63.2%"."""
        return f"{ratio * 100:.1f}%"

    def _group(self, text: str) -> str:
        if self._separator == ",":
            return text
        return text.replace(",", self._separator)


def sanitize(raw: Optional[str], previous_digits: str = "") -> int:
    """Module-level shortcut using the configured settings."""
    return InputSanitizer().sanitize(raw, previous_digits)
