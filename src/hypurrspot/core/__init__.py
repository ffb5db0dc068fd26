"""Core domain logic: errors, security and token synchronization."""
