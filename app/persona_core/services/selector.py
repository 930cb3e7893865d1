"""
Purpose: Pick the next question the persona must ask.

Custom questions always win: if any custom question is still unasked, the
pick is a custom question even when the flags upstream disagree with the
catalog order.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..models import Question

logger = logging.getLogger(__name__)


def select_next_question(catalog: Sequence[Question]) -> Optional[Question]:
    """First unasked question in catalog order, or None when all were asked."""
    pick = next((q for q in catalog if not q.asked), None)
    if pick is None or pick.is_custom:
        return pick

    custom = next((q for q in catalog if q.is_custom and not q.asked), None)
    if custom is not None:
        logger.warning(
            "Overriding default pick %s with unasked custom question %s",
            pick.id,
            custom.id,
        )
        return custom
    return pick
