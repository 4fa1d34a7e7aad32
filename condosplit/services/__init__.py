"""Apportionment services: consumption aggregation, fuel splitters and orchestration."""
