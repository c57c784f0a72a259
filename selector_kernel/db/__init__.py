"""Database layer: declarative base and engine/session management."""

from selector_kernel.db.base import Base, UUIDString

__all__ = ["Base", "UUIDString"]
