from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from decimal import ROUND_HALF_UP, Decimal
from uuid import UUID, uuid4

MIN_RATING = 1
MAX_RATING = 5


def average_rating(ratings: Iterable[int]) -> float:
    """Arithmetic mean rounded half up to one decimal; 0 when empty."""
    values = list(ratings)
    if not values:
        return 0.0
    mean = Decimal(sum(values)) / Decimal(len(values))
    return float(mean.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


@dataclass(frozen=True, slots=True)
class Review:
    id: UUID
    course_id: UUID
    user_id: UUID
    rating: int
    comment: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @staticmethod
    def new(
        *, course_id: UUID, user_id: UUID, rating: int, comment: str | None = None
    ) -> Review:
        return Review(
            id=uuid4(),
            course_id=course_id,
            user_id=user_id,
            rating=rating,
            comment=comment,
        )
