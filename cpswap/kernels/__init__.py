"""
Kernel layer.

Pure integer math used by the exchange. Nothing above this layer performs raw
pricing arithmetic.
"""
