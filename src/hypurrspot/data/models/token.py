"""Token-related Pydantic models.

This module defines the upstream payloads (listing entry, detail) and the
persisted TokenRecord. Python attributes and database columns are
snake_case; the REST API speaks the camelCase names (``tokenIndex``,
``startPx``, ...) through aliases, so ``tokenIndex`` stays the stable
external join key.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

# Columns written by the sync pass on update. Curated columns are never
# part of a sync update so an admin edit landing mid-pass survives.
SYNC_FIELDS: frozenset[str] = frozenset(
    {
        "name",
        "token_id",
        "token_index",
        "start_px",
        "mark_px",
        "launch_date",
        "auction_price",
        "launch_circ_supply",
        "launch_market_cap",
    }
)

# Admin-curated columns and the value they take on first insert.
CURATED_DEFAULTS: dict[str, Any] = {
    "team_allocation": None,
    "airdrop1": None,
    "airdrop2": None,
    "dev_reputation": False,
    "spread_less_than_three": False,
    "thick_ob_liquidity": False,
    "no_sell_pressure": False,
    "twitter": "",
    "telegram": "",
    "discord": "",
    "website": "",
    "comment": "",
}


def _number_to_str(value: Any) -> Any:
    """Upstreams send decimals as strings but occasionally as JSON numbers."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int | float):
        return str(value)
    return value


class CamelModel(BaseModel):
    """Base model exposing camelCase aliases while accepting snake_case names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SpotToken(CamelModel):
    """Listing entry from the Hyperliquid ``spotMeta`` response.

    Attributes:
        name: Token ticker.
        token_id: Hex token identifier used for detail lookups.
        index: Spot token index (the stable identity).
    """

    model_config = ConfigDict(extra="ignore")

    name: str
    token_id: str
    index: int


class TokenDetails(CamelModel):
    """Per-token detail from the Hyperliquid ``tokenDetails`` response.

    Only the fields used by the merge are modelled; the rest is ignored.
    """

    model_config = ConfigDict(extra="ignore")

    name: str
    mark_px: str | None = None
    deploy_time: str | None = None
    seeded_usdc: str | None = None
    circulating_supply: str | None = None

    @field_validator(
        "mark_px", "deploy_time", "seeded_usdc", "circulating_supply", mode="before"
    )
    @classmethod
    def coerce_numbers(cls, v: Any) -> Any:
        """Accept JSON numbers for decimal string fields."""
        return _number_to_str(v)


class TokenRecord(CamelModel):
    """Persisted token document, keyed by ``token_index``.

    Sync-owned fields are recomputed on every pass; curated fields are only
    changed through the admin edit endpoint.

    Example:
        record = TokenRecord(name="PURR", token_id="0xc1fb...", token_index=1)
        record.model_dump(by_alias=True)["tokenIndex"]  # 1
    """

    # Identity
    name: str
    token_id: str
    token_index: int

    # Sync-owned
    start_px: str | None = None
    mark_px: str | None = None
    launch_date: str | None = None
    auction_price: str | None = None
    launch_circ_supply: str | None = None
    launch_market_cap: str | None = None

    # Curated
    team_allocation: str | None = None
    airdrop1: str | None = None
    airdrop2: str | None = None
    dev_reputation: bool = False
    spread_less_than_three: bool = False
    thick_ob_liquidity: bool = False
    no_sell_pressure: bool = False
    twitter: str = ""
    telegram: str = ""
    discord: str = ""
    website: str = ""
    comment: str = ""

    last_updated: datetime | None = Field(
        default=None, description="Set on admin edit only"
    )

    @field_validator("team_allocation", "airdrop1", "airdrop2", mode="before")
    @classmethod
    def coerce_allocations(cls, v: Any) -> Any:
        """Allocations may be entered as numbers."""
        return _number_to_str(v)

    def sync_columns(self) -> dict[str, Any]:
        """Columns written when the sync pass updates an existing row."""
        return self.model_dump(mode="json", include=set(SYNC_FIELDS))

    def insert_columns(self) -> dict[str, Any]:
        """Columns written when the sync pass inserts a new row."""
        return self.model_dump(mode="json", exclude={"last_updated"})


class TokenUpdate(CamelModel):
    """Admin edit payload - curated fields only.

    Unknown and sync-owned fields are rejected so an edit cannot corrupt
    prices or identity.
    """

    model_config = ConfigDict(extra="forbid")

    team_allocation: str | None = None
    airdrop1: str | None = None
    airdrop2: str | None = None
    dev_reputation: bool | None = None
    spread_less_than_three: bool | None = None
    thick_ob_liquidity: bool | None = None
    no_sell_pressure: bool | None = None
    twitter: str | None = None
    telegram: str | None = None
    discord: str | None = None
    website: str | None = None
    comment: str | None = None

    @field_validator("team_allocation", "airdrop1", "airdrop2", mode="before")
    @classmethod
    def coerce_allocations(cls, v: Any) -> Any:
        """Allocations may be entered as numbers."""
        return _number_to_str(v)

    def changes(self) -> dict[str, Any]:
        """Columns explicitly provided in the request.

        An explicit null clears an allocation but is ignored for flags and
        text fields, whose columns are non-nullable.
        """
        provided = self.model_dump(mode="json", exclude_unset=True)
        return {
            field: value
            for field, value in provided.items()
            if value is not None or CURATED_DEFAULTS[field] is None
        }
