"""
LabCash - Source Package

Daily cash tracking for a small laboratory: shift revenue, the fixed
government split, shared expenses, staff shares and personal advances.

DESIGN PRINCIPLES:
1. The financial engine is pure - snapshots in, statements out
2. Money is Decimal end to end; only the display layer rounds
3. Degenerate outcomes (deficits, negative pay) are shown, never hidden
4. Every record change is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "LabCash Team"
