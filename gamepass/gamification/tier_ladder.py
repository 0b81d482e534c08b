"""
Tier Ladder

Maps season XP to reward tiers.

- Only active tiers with a positive threshold take part
- Tiers are ordered by threshold (ties: sort_order, then id)
- Current tier index = number of thresholds <= XP
- Next tier = first tier above XP, or the last tier once everything is reached
- Progress toward the next tier = (XP - previous threshold) / (next - previous),
  clamped to [0, 1]; an empty ladder is "not configured" and reports 0
"""

import logging
from typing import Iterable, Optional

from pydantic import TypeAdapter, ValidationError

from gamepass.models.progress import ReportStatus
from gamepass.models.tier import Reward, TierDef

logger = logging.getLogger(__name__)

_reward_adapter = TypeAdapter(Reward)

# Season report chip thresholds (percent of the top threshold)
IN_PROGRESS_PERCENT = 60
COMPLETE_PERCENT = 100


class TierLadder:
    """Ascending sequence of XP thresholds"""

    def __init__(self, tiers: Iterable[TierDef]):
        eligible = [t for t in tiers if t.active and t.required_points > 0]
        self.tiers: list[TierDef] = sorted(
            eligible,
            key=lambda t: (t.required_points, t.sort_order if t.sort_order is not None else 0, t.id),
        )

    @classmethod
    def from_rows(cls, rows: Iterable[dict]) -> "TierLadder":
        """
        Build a ladder from tier rows

        A row whose id or threshold doesn't parse is skipped. An unreadable
        reward only costs the tier its reward; the tier keeps its rung.
        """
        tiers = []
        for row in rows:
            try:
                tier = TierDef.model_validate({**row, "reward": None})
            except ValidationError as e:
                logger.warning(f"Skipping malformed tier {row.get('id')!r}: {e}")
                continue

            raw_reward = row.get("reward")
            if raw_reward is not None:
                try:
                    tier.reward = _reward_adapter.validate_python(raw_reward)
                except ValidationError as e:
                    logger.warning(f"Ignoring unreadable reward on tier {tier.id!r}: {e}")
            tiers.append(tier)
        return cls(tiers)

    def __len__(self) -> int:
        return len(self.tiers)

    @property
    def configured(self) -> bool:
        return bool(self.tiers)

    @property
    def top_threshold(self) -> int:
        return self.tiers[-1].required_points if self.tiers else 0

    def tier_index(self, xp: int) -> int:
        return sum(1 for t in self.tiers if t.required_points <= xp)

    def reached(self, xp: int) -> list[TierDef]:
        return [t for t in self.tiers if t.required_points <= xp]

    def is_complete(self, xp: int) -> bool:
        return self.configured and self.tier_index(xp) == len(self.tiers)

    def next_tier(self, xp: int) -> Optional[TierDef]:
        """First tier above xp; the last tier once all are reached; None if empty"""
        for tier in self.tiers:
            if tier.required_points > xp:
                return tier
        return self.tiers[-1] if self.tiers else None

    def next_threshold(self, xp: int) -> Optional[int]:
        """Threshold still ahead of xp, or None when complete or empty"""
        for tier in self.tiers:
            if tier.required_points > xp:
                return tier.required_points
        return None

    def previous_threshold(self, xp: int) -> int:
        index = self.tier_index(xp)
        return self.tiers[index - 1].required_points if index > 0 else 0

    def progress_fraction(self, xp: int) -> float:
        if not self.configured:
            return 0.0
        if self.is_complete(xp):
            return 1.0

        prev_req = self.previous_threshold(xp)
        next_req = self.next_tier(xp).required_points
        span = next_req - prev_req
        if span <= 0:
            return 0.0
        return max(0.0, min(1.0, (xp - prev_req) / span))

    def xp_missing(self, xp: int) -> int:
        next_req = self.next_threshold(xp)
        return max(0, next_req - xp) if next_req is not None else 0

    def report_status(self, xp: int) -> ReportStatus:
        """Chip shown next to a player in the season report"""
        if not self.configured:
            return ReportStatus.NOT_CONFIGURED

        percent = round(xp * 100 / self.top_threshold)
        if percent >= COMPLETE_PERCENT:
            return ReportStatus.COMPLETE
        if percent >= IN_PROGRESS_PERCENT:
            return ReportStatus.IN_PROGRESS
        return ReportStatus.START
