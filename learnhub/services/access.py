from __future__ import annotations

import logging
from uuid import UUID

from learnhub.core.errors import ForbiddenError
from learnhub.models.principal import Principal

logger = logging.getLogger(__name__)


def check_owner_or_admin(principal: Principal, owner_id: UUID) -> None:
    """Raise ForbiddenError unless the caller owns the resource or moderates."""
    if principal.user_id == str(owner_id) or principal.is_admin():
        return
    logger.warning(
        "Access denied: user=%s is not owner=%s", principal.user_id, owner_id
    )
    raise ForbiddenError()
