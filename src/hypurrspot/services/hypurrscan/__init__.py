"""Hypurrscan API client."""

from hypurrspot.services.hypurrscan.client import HypurrscanClient

__all__ = ["HypurrscanClient"]
