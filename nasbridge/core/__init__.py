"""Core configuration, models and sync engine."""
