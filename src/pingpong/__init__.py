"""Ping-pong trader.

Alternates target-price swaps between two tokens, executing each when the
live route price beats the target derived from the previous fill.
"""

__version__ = "0.1.0"
