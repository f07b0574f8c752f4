"""
Task Access Policy
==================

Decides which owner, if any, an id-targeted task operation must match.
"""

from typing import Optional

from app.config import settings


class TaskAccessPolicy:
    """
    Ownership rule for update and delete.

    With enforcement off (the default) tasks are looked up by id alone.
    With it on, a task owned by someone else is treated as missing.
    """

    def __init__(self, enforce_ownership: Optional[bool] = None):
        if enforce_ownership is None:
            enforce_ownership = settings.TASK_OWNERSHIP_ENFORCED
        self.enforce_ownership = enforce_ownership

    def owner_scope(self, user_id: Optional[str]) -> Optional[str]:
        """Owner id the store must match, or ``None`` for no check."""
        if not self.enforce_ownership or user_id is None:
            return None
        return user_id
