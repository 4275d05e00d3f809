"""Persistence: SQL store backend and the search source repositories."""
