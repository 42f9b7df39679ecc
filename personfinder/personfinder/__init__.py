"""personfinder — resilient multi-source person lookup."""

__version__ = "1.0.0"
