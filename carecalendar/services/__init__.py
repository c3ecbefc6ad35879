"""Scheduling engine and application services."""
