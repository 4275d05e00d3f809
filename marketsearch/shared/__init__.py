"""Shared utilities: telemetry and sanitization."""
