"""
Multi-asset trading portfolio ledger.

Cash, stock, crypto and leveraged forex positions per owner, with
weighted-average cost accounting, margin bookkeeping, valuation snapshots
and an integrity audit that repairs corrupted stored state.
"""

__version__ = "1.0.0"
