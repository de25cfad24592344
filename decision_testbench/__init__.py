"""Scenario synthesis and verification for business-rule decision graphs."""

__version__ = "0.1.0"
