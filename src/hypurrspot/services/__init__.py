"""Upstream API clients and the shared request throttles."""
