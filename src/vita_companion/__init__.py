"""Personal health-tracking chat assistant (meals, exercises, to-dos)."""

__version__ = "0.3.0"
