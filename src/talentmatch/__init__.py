"""Candidate matching, deal health, interview response and influence alerting."""

__version__ = "0.1.0"
