"""Daily route optimisation."""
