"""IntervalTimer: alternating work/rest countdown with background catch-up."""

__version__ = "0.1.0"
