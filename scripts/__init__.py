"""Operational command line scripts (sitemaps, RSS, cache, Firebase deploys)."""
