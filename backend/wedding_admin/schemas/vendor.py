"""
Vendor schemas for API validation.
"""
import json
from typing import Optional, Dict, Any
from pydantic import BaseModel, ValidationInfo, field_validator

from .couple import validate_email_format


class VendorCreate(BaseModel):
    """Schema for creating a single vendor. user_id holds the vendor's login email."""
    name: str
    user_id: str
    profile_photo: Optional[str] = None
    phone: Optional[str] = None
    years_experience: Optional[str] = None
    profile: Optional[str] = None
    service_areas: Optional[str] = None
    specialties: Optional[str] = None
    stripe_account_id: Optional[str] = None
    gear_list: Optional[str] = None
    portfolio_photos: Optional[str] = None
    portfolio_videos: Optional[str] = None
    awards: Optional[str] = None
    education: Optional[str] = None
    equipment: Optional[str] = None
    social_media: Optional[str] = None
    business_hours: Optional[str] = None
    languages: Optional[str] = None
    insurance_info: Optional[str] = None
    business_license: Optional[str] = None
    service_types: Optional[str] = None

    class Config:
        str_strip_whitespace = True

    @field_validator("name")
    @classmethod
    def name_required(cls, v: str) -> str:
        if not v:
            raise ValueError("name is required")
        return v

    @field_validator("user_id")
    @classmethod
    def email_format(cls, v: str) -> str:
        return validate_email_format(v)

    @field_validator(
        "profile_photo", "phone", "years_experience", "profile", "service_areas",
        "specialties", "stripe_account_id", "gear_list", "portfolio_photos",
        "portfolio_videos", "awards", "education", "languages", "insurance_info",
        "business_license", "service_types",
    )
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None

    @field_validator("equipment", "social_media", "business_hours")
    @classmethod
    def json_text(cls, v: Optional[str], info: ValidationInfo) -> Optional[str]:
        if not v:
            return None
        try:
            json.loads(v)
        except ValueError:
            raise ValueError(f"Invalid JSON in {info.field_name}")
        return v

    def to_payload(self) -> Dict[str, Any]:
        """Edge function body; the login email is sent as "email"."""
        payload = self.model_dump(exclude_none=True)
        payload["email"] = payload.pop("user_id")
        return payload
