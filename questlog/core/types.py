"""Core type definitions."""

from datetime import date, datetime

Instant = datetime | date
Flags = tuple[bool, bool]
