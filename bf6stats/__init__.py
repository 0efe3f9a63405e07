"""
bf6stats: Battlefield 6 player stats retrieval and reconciliation.

Fetches tracker.gg data through a real browser session and reduces the
match-history delta snapshots into lifetime totals.
"""

__version__ = "0.3.0"
