"""
Reward labels

Turns a tier's reward descriptor into the short label shown on the pass
track and stored with tier unlock records.

Label rules (first match wins):
- An explicit ``label`` on the reward
- Kind-specific wording built from the payload (name, then id, then kind)
- An unrecognised kind: the kind string as stored
- No reward, or a reward without a kind: the tier title, then the tier id
"""

import logging
from typing import Optional

from gamepass.models.tier import (
    CardReward,
    ColorReward,
    CustomReward,
    ItemReward,
    Reward,
    RewardKind,
    SkinReward,
    TierDef,
)

logger = logging.getLogger(__name__)

KIND_NAMES = {
    RewardKind.CARD: "Card",
    RewardKind.SKIN: "Skin",
    RewardKind.COLOR: "Color",
    RewardKind.ITEM: "Item",
}


def _named(kind: RewardKind, name: Optional[str], ref_id: Optional[str]) -> str:
    base = KIND_NAMES[kind]
    if name:
        return f"{base}: {name}"
    if ref_id:
        return f"{base} ({ref_id})"
    return base


def format_reward(reward: Reward) -> str:
    """
    Format a reward descriptor

    Raises:
        ValueError: for a reward type this module doesn't know how to label
    """
    if reward.label and reward.label.strip():
        return reward.label.strip()

    if isinstance(reward, CardReward):
        if reward.overall is not None:
            return f"Card overall {reward.overall}"
        if reward.card_id:
            return f"Card ({reward.card_id})"
        return KIND_NAMES[RewardKind.CARD]
    if isinstance(reward, SkinReward):
        return _named(RewardKind.SKIN, reward.skin_name, reward.skin_id)
    if isinstance(reward, ColorReward):
        return _named(RewardKind.COLOR, reward.color_name, reward.color_id)
    if isinstance(reward, ItemReward):
        return _named(RewardKind.ITEM, reward.item_name, reward.item_id)
    if isinstance(reward, CustomReward):
        return (reward.kind or "").strip()

    raise ValueError(f"Unsupported reward type: {type(reward).__name__}")


def format_reward_label(tier: TierDef) -> str:
    """Label for a tier's reward, falling back to the tier itself"""
    if tier.reward is not None:
        label = format_reward(tier.reward)
        if label:
            return label
    return tier.title or tier.id or "—"
