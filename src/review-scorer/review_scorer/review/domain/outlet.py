"""Outlet tiers — coarse prominence classes shown to judges as context."""

from typing import Literal

type OutletTier = Literal[1, 2, 3]

_TIER_1: frozenset[str] = frozenset(
    {
        "NYT", "VARIETY", "THR", "VULT", "WASHPOST", "WSJ",
        "GUARDIAN", "TIMEOUTNY", "BWAYNEWS", "LATIMES", "AP",
    }
)

_TIER_2: frozenset[str] = frozenset(
    {
        "NYP", "CHTRIB", "USATODAY", "NYDN", "EW", "INDIEWIRE", "DEADLINE",
        "OBSERVER", "TDB", "SLANT", "NYTHTR", "NYTG", "NYSR", "TMAN", "THLY",
        "BWAYJOURNAL", "STAGEBUDDY", "WRAP",
    }
)

_TIER_LABELS: dict[int, str] = {
    1: "Tier 1 (major publication)",
    2: "Tier 2 (notable outlet)",
    3: "Tier 3 (smaller outlet)",
}


def outlet_tier(outlet_id: str) -> OutletTier:
    """Tier for an outlet id; unknown outlets are tier 3."""
    key = outlet_id.strip().upper()
    if key in _TIER_1:
        return 1
    if key in _TIER_2:
        return 2
    return 3


def tier_label(tier: OutletTier) -> str:
    return _TIER_LABELS[tier]
