"""Condominium utility-cost apportionment engine."""

__version__ = "0.1.0"
