"""deltacalc: integer table expressions with incremental re-evaluation."""

__version__ = "0.1.0"
