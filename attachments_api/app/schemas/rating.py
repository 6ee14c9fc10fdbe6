"""
Pydantic schema for star ratings.

A rating aggregate holds one counter per star level.  Clients send
deltas in the same shape; fields they omit count as zero.  Counters are
signed so that a client can retract votes with negative deltas, but a
stored aggregate never holds a negative counter (see ``merge``).
"""

from pydantic import BaseModel, ConfigDict, Field


STAR_FIELDS = ("five_stars", "four_stars", "three_stars", "two_stars", "one_stars")


class RatingAggregate(BaseModel):
    """Five star counters for one resource."""

    # Counters must be JSON integers: booleans and numeric strings are rejected.
    model_config = ConfigDict(strict=True)

    five_stars: int = Field(0, description="Number of five star votes")
    four_stars: int = Field(0, description="Number of four star votes")
    three_stars: int = Field(0, description="Number of three star votes")
    two_stars: int = Field(0, description="Number of two star votes")
    one_stars: int = Field(0, description="Number of one star votes")

    def add(self, other: "RatingAggregate") -> "RatingAggregate":
        """Return the component‑wise sum of both aggregates."""
        return RatingAggregate(
            **{name: getattr(self, name) + getattr(other, name) for name in STAR_FIELDS}
        )

    def ensure_not_negative(self) -> "RatingAggregate":
        """Return a copy with every negative counter raised to zero."""
        return RatingAggregate(
            **{name: max(getattr(self, name), 0) for name in STAR_FIELDS}
        )

    def merge(self, delta: "RatingAggregate") -> "RatingAggregate":
        """Add ``delta`` and clamp the result at zero.

        The floor is applied on every merge, so a large negative delta
        cannot leave a deficit for later additions to fill.
        """
        return self.add(delta).ensure_not_negative()
