from .analysis import Analysis
from .base import Base

__all__ = [
    "Base",
    "Analysis",
]
