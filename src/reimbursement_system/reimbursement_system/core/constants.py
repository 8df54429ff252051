"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from decimal import Decimal

DEFAULT_SESSION_DAYS = 7
DEFAULT_RECENT_BILLS = 5
MIN_PASSWORD_LENGTH = 6
TEMP_PASSWORD_BYTES = 16

MONEY_QUANTUM = Decimal("0.01")
MAX_BILL_AMOUNT = Decimal("9999999999.99")

# Column widths in database/schema.sql
NAME_MAX_LENGTH = 100
EMAIL_MAX_LENGTH = 255
