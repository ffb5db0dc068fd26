"""HypurrSpot - Hyperliquid spot token tracker."""

__version__ = "1.0.0"
