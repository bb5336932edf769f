"""
Integer kernels for pricing and share accounting.

- ``cpmm_math``: constant-product quotes with a fractional fee
- ``lp_math``: share minting, burning and deposit ratio checks
"""
