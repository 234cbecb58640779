"""stampgraph: Recursive Stamp Analysis Engine."""

__version__ = "0.1.0"
