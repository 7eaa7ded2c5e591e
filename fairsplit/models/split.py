"""
Core Data Models for FairSplit

These models define the schemas for everything flowing through the
calculator: the three editable inputs, the derived allocation, the two
persisted records and the read-only snapshot handed to the page.

DESIGN DECISION: Persisted records use camelCase aliases so the stored
text matches the layout earlier versions of the app wrote
(`partyASalary`, `partyAContribution`, ...). Python code always uses the
snake_case field names.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# ENUMS
# =============================================================================

class FieldRole(str, Enum):
    """
    The three editable fields.

    PARTY_A and PARTY_B also identify the two income entries.
    """
    PARTY_A = "partyA"
    PARTY_B = "partyB"
    EXPENSE = "expense"

    @property
    def is_party(self) -> bool:
        return self is not FieldRole.EXPENSE


# =============================================================================
# IN-MEMORY ENTRIES
# =============================================================================

class IncomeEntry(BaseModel):
    """
    Income of one party.

    Exactly two exist for the lifetime of a controller; they are mutated,
    never replaced.
    """
    model_config = ConfigDict(validate_assignment=True, allow_inf_nan=False)

    role: FieldRole = Field(
        ...,
        description="partyA or partyB"
    )
    salary: float = Field(
        default=0,
        ge=0,
        description="Income figure as entered"
    )


class ExpenseEntry(BaseModel):
    """The shared expense being split."""
    model_config = ConfigDict(validate_assignment=True, allow_inf_nan=False)

    amount: float = Field(
        default=0,
        ge=0,
        description="Expense figure as entered"
    )


class AllocationResult(BaseModel):
    """
    Proportional split of one expense.

    share_a + share_b equals the expense (up to float rounding) whenever
    the expense and the total income are both positive. No rounding is
    applied here; only the display formatters round.
    """
    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    share_a: float = Field(default=0.0, ge=0)
    share_b: float = Field(default=0.0, ge=0)

    # Fractions of total income, both 0 when there is no income
    ratio_a: float = Field(default=0.0, ge=0, le=1)
    ratio_b: float = Field(default=0.0, ge=0, le=1)

    @property
    def total(self) -> float:
        return self.share_a + self.share_b


# =============================================================================
# PERSISTED RECORDS
# =============================================================================

class PersistedInputs(BaseModel):
    """
    The `inputs` record.

    Every field is optional on load; a missing value falls back to the
    configured default for that field only.
    """
    model_config = ConfigDict(populate_by_name=True, allow_inf_nan=False)

    party_a_salary: Optional[float] = Field(
        default=None,
        ge=0,
        alias="partyASalary"
    )
    party_b_salary: Optional[float] = Field(
        default=None,
        ge=0,
        alias="partyBSalary"
    )
    expense: Optional[float] = Field(
        default=None,
        ge=0,
        alias="expense"
    )


class PersistedContributions(BaseModel):
    """The `contributions` record: the last computed allocation."""
    model_config = ConfigDict(populate_by_name=True, allow_inf_nan=False)

    party_a_contribution: float = Field(
        default=0.0,
        ge=0,
        alias="partyAContribution"
    )
    party_b_contribution: float = Field(
        default=0.0,
        ge=0,
        alias="partyBContribution"
    )

    @classmethod
    def from_allocation(cls, allocation: AllocationResult) -> "PersistedContributions":
        return cls(
            party_a_contribution=allocation.share_a,
            party_b_contribution=allocation.share_b,
        )


class PersistedState(BaseModel):
    """
    Durable snapshot of the calculator.

    The two records are written independently, so either may be missing
    after a partial write.
    """

    inputs: Optional[PersistedInputs] = None
    contributions: Optional[PersistedContributions] = None

    @property
    def is_empty(self) -> bool:
        return self.inputs is None and self.contributions is None


# =============================================================================
# VIEW MODEL
# =============================================================================

class ViewModel(BaseModel):
    """
    Read-only snapshot handed to the presentation layer.

    Holds the raw numbers and their display text. A new instance is built
    for every render, so the page can never mutate controller state.
    """
    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    party_a_salary: float
    party_b_salary: float
    expense: float
    share_a: float
    share_b: float

    # Display text
    party_a_salary_text: str
    party_b_salary_text: str
    expense_text: str
    share_a_text: str
    share_b_text: str
    party_a_percent_text: str
    party_b_percent_text: str

    restored: bool = Field(
        default=False,
        description="Were the inputs seeded from persisted state?"
    )

    def input_text(self, role: FieldRole) -> str:
        """Formatted echo for one editable field."""
        return {
            FieldRole.PARTY_A: self.party_a_salary_text,
            FieldRole.PARTY_B: self.party_b_salary_text,
            FieldRole.EXPENSE: self.expense_text,
        }[FieldRole(role)]
