"""Monte Carlo game outcome predictions for MLB games."""

__version__ = "0.1.0"
