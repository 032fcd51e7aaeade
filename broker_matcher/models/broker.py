"""
Broker record — the read-only input to the scoring engine.

``Broker`` mirrors the catalog entries served to the comparison site. The
catalog uses camelCase keys (``spreadsFrom``, ``minDeposit``, ...); the model
accepts those as aliases while exposing snake_case attributes, so a record
loaded from the web catalog JSON validates without any key mapping.

Quality signals:  ``rating`` (0–5), ``trust_score`` (0–10), ``verified``,
                  ``featured``.
Cost signals:     ``spreads_from``, ``min_deposit``.
Capability:       ``max_leverage``, ``platforms`` (free-text tokens such as
                  ``"MT4"``, ``"WebTrader"``, ``"Crypto CFDs"``).

Frozen — a broker is immutable for the duration of a scoring pass.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class Broker(BaseModel):
    """A broker catalog entry.

    Attributes:
        id: Unique slug, e.g. ``"ic-markets"``.
        name: Display name.
        rating: Editorial rating in ``[0, 5]``.
        trust_score: Optional trust score in ``[0, 10]``.
        verified: ``True`` once the listing has been verified.
        featured: ``True`` for promoted listings.
        spreads_from: Lowest advertised spread in pips (``0`` = commission-free).
        min_deposit: Minimum first deposit in USD.
        max_leverage: Maximum leverage ratio, e.g. ``500`` for 1:500.
        platforms: Platform / capability tokens.
        restricted_countries: Region codes this broker cannot onboard.
        review_count: Number of user reviews (catalog validation only).
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    rating: float = Field(ge=0.0, le=5.0)
    trust_score: Optional[float] = Field(default=None, ge=0.0, le=10.0)
    verified: bool = False
    featured: bool = False
    spreads_from: float = Field(default=0.0, ge=0.0)
    min_deposit: float = Field(default=0.0, ge=0.0)
    max_leverage: float = Field(default=0.0, ge=0.0)
    platforms: tuple[str, ...] = ()
    restricted_countries: frozenset[str] = frozenset()
    review_count: int = Field(default=0, ge=0)

    @field_validator("restricted_countries")
    @classmethod
    def normalize_countries(cls, v: frozenset[str]) -> frozenset[str]:
        return frozenset(c.strip().upper() for c in v if c.strip())

    def has_platform(self, *keywords: str) -> bool:
        """Return ``True`` if any platform token contains any of ``keywords``.

        Matching is a case-insensitive substring test, so ``"mt4"`` matches
        ``"MetaTrader MT4"``.
        """
        tokens = [p.lower() for p in self.platforms]
        return any(kw in token for token in tokens for kw in keywords)

    def serves_country(self, country: str) -> bool:
        """Return ``False`` when ``country`` is on this broker's restricted list."""
        return country.strip().upper() not in self.restricted_countries
