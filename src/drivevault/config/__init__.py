"""Configuration exports for drivevault."""

from __future__ import annotations

from .settings import IsolationPolicy, Settings

__all__ = ["IsolationPolicy", "Settings"]
