"""Defensive document extraction gateway for RoadLedger."""

__version__ = "0.1.0"
