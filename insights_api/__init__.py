"""Employee insights API: read-only sentiment summaries over HTTP."""
from __future__ import annotations

APP_NAME = "employee-insights-api"
__version__ = "1.0.0"
