"""
dex/ - Pool reserves and venue quotes.

Subpackages:
- reserves: On-ledger reserve resolution with ordered fallbacks
- venues: Per-venue quote adapters and the cross-venue aggregator
"""
