"""
Integer kernels for pricing and share math.

Pure functions returning frozen result dataclasses; no state, no I/O.
"""
