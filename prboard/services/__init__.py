"""Aggregation, storage and dashboard helpers."""
