"""Behavior trees, blackboards, sensors, decision memory and logging for NPC agents."""

__version__ = "0.1.0"