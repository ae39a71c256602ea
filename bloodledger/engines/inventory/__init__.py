"""
Inventory Ledger Engine
=======================
Per-blood-type buckets credited by donations and debited by
approved request fulfilments.
"""
