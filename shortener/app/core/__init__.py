"""Service-wide identifiers shared by log events."""
from __future__ import annotations

SERVICE_NAME = "url-shortener"
