"""
hashchain - a minimal hash-linked ledger.
"""

__version__ = "0.1.0"
