from __future__ import annotations

import logging

from pet_brain.core.models import CanonicalResponse, OutboundResponse

logger = logging.getLogger(__name__)


def transform(raw: OutboundResponse) -> CanonicalResponse:
    """
    Reduce a raw outbound response to the fields every observer agrees on.

    Headers (dates, request ids, cookies) differ between observers of the same
    call and are always dropped. Status and body pass through untouched, so
    applying the transform twice gives the same result as applying it once.
    """
    if raw.status != 200:
        logger.warning(
            "Completion provider returned status %d (%d body bytes)", raw.status, len(raw.body)
        )
    return CanonicalResponse(status=raw.status, body=raw.body)
