"""External adapters."""
from pocketsync.infrastructure.external.gemini_analyzer import GeminiAnalyzer
from pocketsync.infrastructure.external.heuristic_analyzer import HeuristicAnalyzer

__all__ = [
    "GeminiAnalyzer",
    "HeuristicAnalyzer",
]
