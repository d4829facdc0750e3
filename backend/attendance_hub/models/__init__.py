"""Application domain models."""

from attendance_hub.models.role import AppRole, narrow_role

__all__ = ["AppRole", "narrow_role"]
