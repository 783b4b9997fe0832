"""Vote-casting and tallying engine with a FastAPI binding."""
from .config import Settings
from .system import VotingSystem

__all__ = ["Settings", "VotingSystem"]
