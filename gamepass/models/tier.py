"""Reward tier models"""
from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union
from pydantic import BaseModel, Discriminator, Tag


class RewardKind(str, Enum):
    """Kinds of reward a tier can hand out"""
    CARD = "card"
    SKIN = "skin"
    COLOR = "color"
    ITEM = "item"


class _RewardBase(BaseModel):
    label: Optional[str] = None  # overrides the generated label
    image_url: Optional[str] = None


class CardReward(_RewardBase):
    kind: Literal[RewardKind.CARD] = RewardKind.CARD
    card_id: Optional[str] = None
    overall: Optional[int] = None


class SkinReward(_RewardBase):
    kind: Literal[RewardKind.SKIN] = RewardKind.SKIN
    skin_id: Optional[str] = None
    skin_name: Optional[str] = None


class ColorReward(_RewardBase):
    kind: Literal[RewardKind.COLOR] = RewardKind.COLOR
    color_id: Optional[str] = None
    color_name: Optional[str] = None


class ItemReward(_RewardBase):
    kind: Literal[RewardKind.ITEM] = RewardKind.ITEM
    item_id: Optional[str] = None
    item_name: Optional[str] = None


class CustomReward(_RewardBase):
    """Reward with a missing or unrecognised kind, labelled by label or kind string"""
    kind: Optional[str] = None


CUSTOM_TAG = "custom"
KNOWN_KINDS = frozenset(k.value for k in RewardKind)


def reward_tag(value: Any) -> str:
    """Pick the reward model for a raw dict or an already-built reward"""
    if isinstance(value, CustomReward):
        return CUSTOM_TAG
    kind = value.get("kind") if isinstance(value, dict) else getattr(value, "kind", None)
    if isinstance(kind, RewardKind):
        return kind.value
    if isinstance(kind, str) and kind in KNOWN_KINDS:
        return kind
    return CUSTOM_TAG


Reward = Annotated[
    Union[
        Annotated[CardReward, Tag(RewardKind.CARD.value)],
        Annotated[SkinReward, Tag(RewardKind.SKIN.value)],
        Annotated[ColorReward, Tag(RewardKind.COLOR.value)],
        Annotated[ItemReward, Tag(RewardKind.ITEM.value)],
        Annotated[CustomReward, Tag(CUSTOM_TAG)],
    ],
    Discriminator(reward_tag),
]


class TierDef(BaseModel):
    """One rung of the Tier Ladder"""
    id: str
    title: str = ""
    required_points: int
    active: bool = True
    reward: Optional[Reward] = None
    rarity: Optional[str] = None
    sort_order: Optional[int] = None


class ClaimRecord(BaseModel):
    """Acknowledgment that a user's XP crossed a tier threshold"""
    user_id: str
    tier_id: str
    points_at_unlock: int
    required_points: int
    reward_label: str = ""
    unlocked_at: Optional[datetime] = None
