"""
Crypto Ledger - Source Package

A personal finance tracker for income and expenses denominated in a
cryptocurrency unit, with amounts converted to a local fiat currency
using an AI-fetched exchange rate.

DESIGN PRINCIPLES:
1. Every mutation is persisted immediately
2. Derived totals are never stored, always recomputed
3. The rate lookup is best-effort and can never corrupt state
4. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Crypto Ledger Team"
