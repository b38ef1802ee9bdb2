"""Evidence aggregation and verdict scoring for places and buildings."""

__version__ = "0.1.0"
