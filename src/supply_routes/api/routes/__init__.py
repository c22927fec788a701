"""Route group exports."""

from . import allocation, health, planner

__all__ = ["allocation", "planner", "health"]
