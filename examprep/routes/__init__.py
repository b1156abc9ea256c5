"""API route modules."""
from examprep.routes import attempts, results

__all__ = ["attempts", "results"]
