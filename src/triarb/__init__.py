"""
Triangular Arbitrage Engine.

An asynchronous bot that ranks triangular arbitrage cycles on a single
exchange, checks them against live precision and fees, and places the
three legs with balance-checked order submission.
"""

__version__ = "1.0.0"
