"""Field route planner: revisit scheduling and daily route optimisation."""

__version__ = "0.1.0"
