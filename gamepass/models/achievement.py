"""Achievement catalog models"""
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class ItemGrant(BaseModel):
    """Inventory item handed out when an achievement is approved"""
    item_id: str
    qty: int = 0


class AchievementDef(BaseModel):
    """Achievement definition (maintained by site admins, read-only here)"""
    id: str
    title: str
    description: str = ""
    points: int = Field(default=0, ge=0)
    prerequisites: list[str] = Field(default_factory=list)
    active: bool = True
    item_reward: Optional[ItemGrant] = None

    @property
    def display_title(self) -> str:
        return self.title or self.id

    def missing_prerequisites(self, earned_ids: set[str]) -> list[str]:
        """Prerequisite ids not yet earned, in declaration order"""
        return [pre_id for pre_id in self.prerequisites if pre_id not in earned_ids]


class CatalogState(str, Enum):
    """Per-user state of a catalog entry"""
    EARNED = "earned"
    LOCKED = "locked"
    CLAIMABLE = "claimable"


class CatalogEntry(BaseModel):
    """Achievement as seen by one user"""
    achievement: AchievementDef
    state: CatalogState
    missing_prerequisites: list[str] = Field(default_factory=list)
