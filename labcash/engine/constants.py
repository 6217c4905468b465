"""
Engine Constants

Fixed at build time. To run the engine with a different split, pass a
RevenueSplit to compute_statement() instead of editing the engine.
"""

from decimal import Decimal

from labcash.models.records import ShiftType
from labcash.models.statement import RevenueSplit


GOVT_FRACTION = Decimal("0.85")
STAFF_FRACTION = Decimal("0.15")

DEFAULT_SPLIT = RevenueSplit(
    government_fraction=GOVT_FRACTION,
    staff_fraction=STAFF_FRACTION,
)

# Display order of shifts within a day
SHIFT_RANK = {
    ShiftType.MORNING: 1,
    ShiftType.EVENING: 2,
    ShiftType.NIGHT: 3,
}

# Banknotes counted by the cash calculator, largest first
DENOMINATIONS = (5000, 1000, 500, 100, 50, 20, 10)

MONTHLY_DISTRIBUTION_LABEL = "Monthly distribution"
