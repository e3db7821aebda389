"""File, list, score and monitor inspection reports for city districts."""

__version__ = "0.1.0"
__all__ = ["records", "manager", "scorer", "monitor", "hub"]