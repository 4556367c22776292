"""Route handlers for ``/``, ``/daily`` and ``/readings``."""

from .daily import DailyPage
from .overview import OverviewPage
from .readings import ReadingsPage

__all__ = ["DailyPage", "OverviewPage", "ReadingsPage"]
