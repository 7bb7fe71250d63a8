"""
Human-readable order references.

A reference is four characters drawn from an alphabet without the easily
confused ``0/O`` and ``1/I`` pairs, so it can be read out over a counter
and typed back without ambiguity. Candidates are drawn until one is not
already used by an order; each check is a single indexed lookup.
"""
import secrets
from typing import Callable

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from shared.observability.metrics import cafe_reference_collisions_total
from .repository import OrderRepository

logger = structlog.get_logger(__name__)

REFERENCE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
REFERENCE_LENGTH = 4


def random_reference(choice: Callable[[str], str] = secrets.choice) -> str:
    return "".join(choice(REFERENCE_ALPHABET) for _ in range(REFERENCE_LENGTH))


class ReferenceGenerator:

    def __init__(self, draw: Callable[[], str] = random_reference):
        self._draw = draw

    async def generate(self, db: AsyncSession) -> str:
        """Return a reference no stored order uses. Retries without bound on collision."""
        attempts = 0
        while True:
            attempts += 1
            candidate = self._draw()
            if not await OrderRepository.exists_by_reference(db, candidate):
                if attempts > 1:
                    logger.info("order_reference_generated", reference=candidate, attempts=attempts)
                return candidate
            cafe_reference_collisions_total.labels(stage="lookup").inc()
            logger.debug("order_reference_taken", reference=candidate, attempt=attempts)
