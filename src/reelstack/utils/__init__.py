"""Utility helpers shared across ReelStack modules."""
