"""Repository layer: read-only access to insight_summary (SQLite).

Keep functions thin and focused, so services avoid SQL strings.
"""
from __future__ import annotations
