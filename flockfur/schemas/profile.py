"""
==============================================================================
Cleaner Profile & Favorites Schemas Module
==============================================================================

Own-profile editing, public cleaner pages and client favorites.

==============================================================================
"""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator
from flockfur.db.models import CleanerProfile, User
from flockfur.schemas.review import RatingSummary


class CleanerProfileUpdate(BaseModel):
    """Partial update; omitted fields are left unchanged."""
    bio: Optional[str] = Field(default=None, max_length=2000)
    animal_experience: Optional[str] = Field(default=None, max_length=2000)
    years_experience: Optional[int] = Field(default=None, ge=0, le=80)
    has_transportation: Optional[bool] = None
    service_areas: Optional[List[str]] = Field(default=None, max_length=50)

    @field_validator("service_areas")
    @classmethod
    def clean_areas(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        if v is None:
            return None
        cleaned = [area.strip() for area in v if area and area.strip()]
        return list(dict.fromkeys(cleaned))


class CleanerProfileDetail(BaseModel):
    user_id: str
    bio: Optional[str] = None
    animal_experience: Optional[str] = None
    years_experience: Optional[int] = None
    has_transportation: bool = False
    service_areas: List[str] = Field(default_factory=list)
    stripe_onboarded: bool = False
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CleanerProfileResponse(BaseModel):
    success: bool = Field(default=True)
    profile: CleanerProfileDetail


class PublicCleaner(BaseModel):
    """Cleaner as shown to clients: no contact or payout details."""
    id: str
    name: str
    bio: Optional[str] = None
    animal_experience: Optional[str] = None
    years_experience: Optional[int] = None
    has_transportation: bool = False
    service_areas: List[str] = Field(default_factory=list)
    rating: RatingSummary
    member_since: datetime

    @classmethod
    def from_model(
        cls,
        user: User,
        profile: Optional[CleanerProfile],
        rating: RatingSummary,
    ) -> "PublicCleaner":
        return cls(
            id=user.id,
            name=user.name,
            bio=profile.bio if profile else None,
            animal_experience=profile.animal_experience if profile else None,
            years_experience=profile.years_experience if profile else None,
            has_transportation=bool(profile.has_transportation) if profile else False,
            service_areas=list(profile.service_areas or []) if profile else [],
            rating=rating,
            member_since=user.created_at,
        )


class PublicCleanerResponse(BaseModel):
    success: bool = Field(default=True)
    cleaner: PublicCleaner


class FavoriteListResponse(BaseModel):
    success: bool = Field(default=True)
    cleaners: List[PublicCleaner]
    total: int


class FavoriteStatusResponse(BaseModel):
    success: bool = Field(default=True)
    cleaner_id: str
    is_favorite: bool
