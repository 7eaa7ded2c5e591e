"""
Allocation Engine

DESIGN DECISION: Allocation is a pure function of the three inputs.
The controller calls it with the full current input set on every edit,
so there is no incremental state that could drift.

Zero total income is not an error: both parties owe nothing, instead of
the undefined 0/0 ratio.
"""

from fairsplit.models.split import AllocationResult


class AllocationError(ValueError):
    """Inputs violate the engine's preconditions."""
    pass


def allocate(
    salary_a: float,
    salary_b: float,
    expense: float,
) -> AllocationResult:
    """
    Split an expense in proportion to two incomes.

    Args:
        salary_a: Income of the first party (>= 0)
        salary_b: Income of the second party (>= 0)
        expense: Shared expense to split (>= 0)

    Returns:
        Unrounded shares and income ratios

    Raises:
        AllocationError: If any argument is negative
    """
    for name, value in (
        ("salary_a", salary_a),
        ("salary_b", salary_b),
        ("expense", expense),
    ):
        if value < 0:
            raise AllocationError(f"{name} must be non-negative, got {value}")

    total = salary_a + salary_b
    if total == 0:
        return AllocationResult()

    ratio_a = salary_a / total
    ratio_b = salary_b / total

    return AllocationResult(
        share_a=ratio_a * expense,
        share_b=ratio_b * expense,
        ratio_a=ratio_a,
        ratio_b=ratio_b,
    )


class AllocationEngine:
    """Object wrapper so the engine can be injected like the other services."""

    def allocate(
        self,
        salary_a: float,
        salary_b: float,
        expense: float,
    ) -> AllocationResult:
        return allocate(salary_a, salary_b, expense)
