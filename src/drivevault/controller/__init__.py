"""Internal controller exports for drivevault."""

from __future__ import annotations

from .drive_controller import DriveController

__all__ = ["DriveController"]
