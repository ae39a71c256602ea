"""
Directory Engine
================
Authority-managed hospital directory and the registered-address
listing.
"""
