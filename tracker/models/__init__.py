"""Models module - Import all models here so they register with Base."""
from tracker.db.base import Base
from tracker.models.user import User
from tracker.models.test import Test, Completion

__all__ = ["Base", "User", "Test", "Completion"]
