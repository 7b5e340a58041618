"""ORM models. Importing this package registers every table on Base.metadata."""

from busadmin.models.admin import Admin
from busadmin.models.bus import Bus, BUS_STATUSES

__all__ = ["Admin", "Bus", "BUS_STATUSES"]
