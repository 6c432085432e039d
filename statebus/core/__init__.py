"""Shared building blocks: argument keys, notification channel, models, settings."""
