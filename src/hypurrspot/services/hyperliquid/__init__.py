"""Hyperliquid info API client."""

from hypurrspot.services.hyperliquid.client import HyperliquidClient

__all__ = ["HyperliquidClient"]
