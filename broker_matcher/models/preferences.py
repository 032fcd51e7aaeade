"""
User preference vector assembled by the questionnaire.

Every dimension is optional. An unanswered dimension contributes no score
and imposes no filter. The questionnaire initialises unanswered fields to
``""`` (and ``assets`` to ``[]``); those are normalised to ``None`` / ``()``
here so the scoring rules only ever see "answered" or "absent".

``country`` is the one hard filter (see ``scoring.rules.is_country_vetoed``).
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from broker_matcher.taxonomy.preference_taxonomy import (
    AssetType,
    DepositAmount,
    FeePreference,
    TradingExperience,
    TradingFrequency,
)


class UserPreferences(BaseModel):
    """Trading preferences for one filtering request.

    Attributes:
        country: Region code of the user's residence, e.g. ``"GB"``.
        assets: Selected asset classes in selection order, de-duplicated.
        experience: Self-reported experience level.
        fee_preference: Cost sensitivity.
        frequency: Expected trading cadence.
        deposit_amount: Budget band for the first deposit.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    country: Optional[str] = None
    assets: tuple[AssetType, ...] = ()
    experience: Optional[TradingExperience] = None
    fee_preference: Optional[FeePreference] = None
    frequency: Optional[TradingFrequency] = None
    deposit_amount: Optional[DepositAmount] = None

    @field_validator(
        "country", "experience", "fee_preference", "frequency", "deposit_amount",
        mode="before",
    )
    @classmethod
    def blank_is_unanswered(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("country")
    @classmethod
    def normalize_country(cls, v: Optional[str]) -> Optional[str]:
        return v.strip().upper() if v is not None else None

    @field_validator("assets", mode="before")
    @classmethod
    def assets_default(cls, v: Any) -> Any:
        return () if v is None else v

    @field_validator("assets")
    @classmethod
    def dedupe_assets(cls, v: tuple[AssetType, ...]) -> tuple[AssetType, ...]:
        return tuple(dict.fromkeys(v))

    def is_empty(self) -> bool:
        """Return ``True`` when no dimension has been answered."""
        return (
            self.country is None
            and not self.assets
            and self.experience is None
            and self.fee_preference is None
            and self.frequency is None
            and self.deposit_amount is None
        )
