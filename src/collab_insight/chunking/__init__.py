"""Change-unit building: bundle small commits, split large ones."""

from .builder import ChangeUnitBuilder
from .paths import drop_skipped, is_skipped_path

__all__ = ["ChangeUnitBuilder", "drop_skipped", "is_skipped_path"]
