"""
Shared helpers used across the commerce apps: pagination, licence-tier
feature gating and action-scoped rate limiting.
"""
