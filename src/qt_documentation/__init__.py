"""Matching of Qt reference documentation to API declarations."""
