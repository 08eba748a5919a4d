"""
Storage Kernel - placement and consistency engine

Tracks barcoded items inside a hierarchy of nested storage locations:
- Grid addressing under four traversal orders
- Cycle, bounds and occupancy validation
- Transactional store / unstore / transfer
- Append-only store records for every item change
"""

__version__ = "0.1.0"
