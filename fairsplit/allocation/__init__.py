"""Allocation package."""

from fairsplit.allocation.engine import AllocationEngine, AllocationError, allocate

__all__ = ["AllocationEngine", "AllocationError", "allocate"]
