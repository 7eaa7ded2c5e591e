"""
FairSplit - Source Package

Splits a shared expense between two earners in proportion to their
incomes, and remembers the last figures entered.

DESIGN PRINCIPLES:
1. Typing never fails: any entry becomes a valid number
2. Every edit recomputes from the full input set
3. Storage is swappable and never blocks the calculator
4. Every step is logged
"""

__version__ = "1.0.0"
__author__ = "FairSplit Team"
