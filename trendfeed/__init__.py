"""trendfeed - tech article aggregator."""

__version__ = "0.1.0"
