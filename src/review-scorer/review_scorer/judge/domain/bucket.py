"""Bucket vocabulary and the bucket range table that maps buckets to score ranges."""

from enum import StrEnum

from pydantic import BaseModel, Field, model_validator


class Bucket(StrEnum):
    RAVE = "Rave"
    POSITIVE = "Positive"
    MIXED = "Mixed"
    NEGATIVE = "Negative"
    PAN = "Pan"


# Most favourable first; distance between buckets is the difference in position.
BUCKET_ORDER: tuple[Bucket, ...] = (
    Bucket.RAVE,
    Bucket.POSITIVE,
    Bucket.MIXED,
    Bucket.NEGATIVE,
    Bucket.PAN,
)


def bucket_distance(a: Bucket, b: Bucket) -> int:
    """Number of bucket steps between a and b (0 = same, 1 = adjacent)."""
    return abs(BUCKET_ORDER.index(a) - BUCKET_ORDER.index(b))


class BucketRange(BaseModel, frozen=True):
    """Closed integer score range [low, high] owned by one bucket."""

    bucket: Bucket
    low: int = Field(ge=0, le=100)
    high: int = Field(ge=0, le=100)

    @model_validator(mode="after")
    def _check_order(self) -> "BucketRange":
        if self.low > self.high:
            raise ValueError(f"bucket {self.bucket} has low > high")
        return self

    @property
    def midpoint(self) -> int:
        return (self.low + self.high) // 2


_DEFAULT_RANGES: list[BucketRange] = [
    BucketRange(bucket=Bucket.PAN, low=0, high=34),
    BucketRange(bucket=Bucket.NEGATIVE, low=35, high=54),
    BucketRange(bucket=Bucket.MIXED, low=55, high=69),
    BucketRange(bucket=Bucket.POSITIVE, low=70, high=84),
    BucketRange(bucket=Bucket.RAVE, low=85, high=100),
]


class BucketTable(BaseModel, frozen=True):
    """The canonical bucket -> score range table.

    Ranges are contiguous, non-overlapping, ordered Pan..Rave from low to high
    scores and together cover 0-100.
    """

    ranges: list[BucketRange] = Field(default_factory=lambda: list(_DEFAULT_RANGES))

    @model_validator(mode="after")
    def _check_coverage(self) -> "BucketTable":
        buckets = [r.bucket for r in self.ranges]
        if len(buckets) != len(BUCKET_ORDER) or set(buckets) != set(BUCKET_ORDER):
            raise ValueError("bucket table must define exactly one range per bucket")

        ordered = sorted(self.ranges, key=lambda r: r.low)
        expected_order = list(reversed(BUCKET_ORDER))
        if [r.bucket for r in ordered] != expected_order:
            raise ValueError("bucket ranges must ascend Pan, Negative, Mixed, Positive, Rave")
        if ordered[0].low != 0 or ordered[-1].high != 100:
            raise ValueError("bucket ranges must cover 0-100")
        for lower, upper in zip(ordered, ordered[1:]):
            if upper.low != lower.high + 1:
                raise ValueError(
                    f"bucket ranges {lower.bucket} and {upper.bucket} are not contiguous"
                )
        return self

    def range_for(self, bucket: Bucket) -> BucketRange:
        for bucket_range in self.ranges:
            if bucket_range.bucket == bucket:
                return bucket_range
        raise KeyError(bucket)

    def bucket_for(self, score: float) -> Bucket:
        """Map a score (possibly fractional) to its bucket.

        Fractional scores between two integer ranges belong to the lower range,
        e.g. 54.5 is Negative under the default table.
        """
        if score < 0 or score > 100:
            raise ValueError(f"score {score} is outside 0-100")
        for bucket_range in sorted(self.ranges, key=lambda r: r.low, reverse=True):
            if score >= bucket_range.low:
                return bucket_range.bucket
        return Bucket.PAN

    def contains(self, bucket: Bucket, score: float) -> bool:
        bucket_range = self.range_for(bucket)
        return bucket_range.low <= score <= bucket_range.high

    def clamp(self, bucket: Bucket, score: int) -> int:
        bucket_range = self.range_for(bucket)
        return max(bucket_range.low, min(bucket_range.high, score))
