"""
Principal & Permission Registry Engine
======================================
Donor and patient registration, per-role permission flags.
"""
