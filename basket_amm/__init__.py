"""Invariant-curve AMM for baskets of near-equal-value assets."""

__version__ = "0.1.0"
