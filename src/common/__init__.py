"""Shared helpers used across the planner modules."""
