"""Schemas describing Cafe24 customer profiles."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator


class CustomerProfile(BaseModel):
    """Subset of a Cafe24 customer (or customersprivacy) object."""

    model_config = ConfigDict(extra="ignore")

    member_id: Optional[str] = None
    name: Optional[str] = None
    cellphone: Optional[str] = None
    email: Optional[str] = None
    address1: Optional[str] = None
    address2: Optional[str] = None
    sms: Optional[str] = None
    news_mail: Optional[str] = None
    gender: Optional[str] = None
    shop_no: Optional[str] = None
    group_no: Optional[str] = None
    member_authentication: Optional[str] = None
    use_blacklist: Optional[str] = None
    blacklist_type: Optional[str] = None
    authentication_method: Optional[str] = None
    solar_calendar: Optional[str] = None
    total_points: Optional[str] = None
    available_points: Optional[str] = None
    used_points: Optional[str] = None
    last_login_date: Optional[str] = None
    created_date: Optional[str] = None
    use_mobile_app: Optional[str] = None
    available_credits: Optional[str] = None
    fixed_group: Optional[str] = None

    @field_validator("*", mode="before")
    @classmethod
    def _as_trimmed_string(cls, value: Any) -> Optional[str]:
        """Cafe24 mixes numbers, padded strings and nulls across versions."""
        if value is None:
            return None
        if isinstance(value, bool):
            return "T" if value else "F"
        if isinstance(value, (list, dict)):
            return None
        return str(value).strip()

    @property
    def full_address(self) -> str:
        parts = [part for part in (self.address1, self.address2) if part]
        return " ".join(parts)


__all__ = ["CustomerProfile"]
