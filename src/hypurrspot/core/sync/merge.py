"""Merge freshly fetched token data with the stored record.

The merge is a pure function of its inputs:

    merge_token_record(listing_entry, detail, existing, reference_price)

Sync-owned fields are recomputed from upstream data, ``start_px`` comes from
the reference table and never regresses to null once set, and curated
fields are carried over from the existing record (defaults apply only on
first insert).
"""

from decimal import ROUND_HALF_UP, Decimal, DecimalException, InvalidOperation, localcontext

from hypurrspot.core.exceptions import TokenMergeError
from hypurrspot.data.models.token import (
    CURATED_DEFAULTS,
    SpotToken,
    TokenDetails,
    TokenRecord,
)

MARKET_CAP_QUANTUM = Decimal("0.01")


def _to_decimal(value: str | None, field: str, token_index: int) -> Decimal | None:
    """Parse an upstream decimal string; missing or blank means None."""
    if value is None or str(value).strip() == "":
        return None
    try:
        parsed = Decimal(str(value).strip())
    except InvalidOperation as e:
        raise TokenMergeError(
            f"Unparseable {field}: {value!r}", token_index=token_index
        ) from e
    if not parsed.is_finite():
        raise TokenMergeError(f"Non-finite {field}: {value!r}", token_index=token_index)
    return parsed


def _format_decimal(value: Decimal) -> str:
    """Render without exponent or trailing zeros (0.10 -> "0.1", 1E+1 -> "10")."""
    normalized = value.normalize()
    if normalized == 0:
        return "0"
    return format(normalized, "f")


def launch_date_from(deploy_time: str | None) -> str | None:
    """Date portion of an ISO deploy timestamp."""
    if not deploy_time:
        return None
    return deploy_time.split("T")[0] or None


def auction_price_from(
    seeded_usdc: str | None, circulating_supply: str | None, token_index: int
) -> str | None:
    """seededUsdc / circulatingSupply, or None when seededUsdc is missing or zero.

    A missing or zero supply also yields None.
    """
    seeded = _to_decimal(seeded_usdc, "seededUsdc", token_index)
    if seeded is None or seeded == 0:
        return None

    supply = _to_decimal(circulating_supply, "circulatingSupply", token_index)
    if supply is None or supply == 0:
        return None

    try:
        with localcontext():
            return _format_decimal(seeded / supply)
    except DecimalException as e:
        raise TokenMergeError(
            f"Cannot compute auctionPrice from {seeded_usdc!r} / {circulating_supply!r}",
            token_index=token_index,
        ) from e


def launch_market_cap_from(
    start_px: str | None, circulating_supply: str | None, token_index: int
) -> str | None:
    """startPx * circulatingSupply fixed to 2 decimals, or None if either is missing."""
    price = _to_decimal(start_px, "startPx", token_index)
    supply = _to_decimal(circulating_supply, "circulatingSupply", token_index)
    if price is None or supply is None:
        return None

    try:
        with localcontext():
            market_cap = (price * supply).quantize(MARKET_CAP_QUANTUM, rounding=ROUND_HALF_UP)
    except DecimalException as e:
        raise TokenMergeError(
            f"Cannot compute launchMarketCap from {start_px!r} * {circulating_supply!r}",
            token_index=token_index,
        ) from e
    return format(market_cap, "f")


def merge_token_record(
    listing_entry: SpotToken,
    detail: TokenDetails,
    existing: TokenRecord | None,
    reference_price: str | None,
) -> TokenRecord:
    """Build the record to persist for one token.

    Args:
        listing_entry: Identity from the spot listing.
        detail: Fresh per-token detail.
        existing: Stored record for the same index, if any.
        reference_price: Launch price from the reference table, if any.

    Returns:
        The merged TokenRecord.

    Raises:
        TokenMergeError: If a numeric upstream field cannot be parsed.
    """
    token_index = listing_entry.index

    start_px = reference_price or (existing.start_px if existing else None)

    curated = {
        field: getattr(existing, field) if existing is not None else default
        for field, default in CURATED_DEFAULTS.items()
    }

    return TokenRecord(
        name=listing_entry.name,
        token_id=listing_entry.token_id,
        token_index=token_index,
        start_px=start_px,
        mark_px=detail.mark_px or None,
        launch_date=launch_date_from(detail.deploy_time),
        auction_price=auction_price_from(
            detail.seeded_usdc, detail.circulating_supply, token_index
        ),
        launch_circ_supply=detail.circulating_supply or None,
        launch_market_cap=launch_market_cap_from(
            start_px, detail.circulating_supply, token_index
        ),
        last_updated=existing.last_updated if existing else None,
        **curated,
    )
