"""
Kernel layer.

`simpleswap/kernels/python/` holds the integer-only pricing and share math.
The engine never does arithmetic on reserves outside these modules.
"""
