"""Study planner: task store, derived views and reminder scheduler."""

__version__ = "0.1.0"
