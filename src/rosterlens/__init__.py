"""Constraint evaluation and conflict detection for staff schedules."""

__version__ = "0.1.0"
