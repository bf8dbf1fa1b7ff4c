"""
Key column suggestion services.

Suggestions only pre-fill the key selection; matching never depends on them.
"""

from .suggestion_service import (
    GeminiSuggestionService,
    HeuristicSuggestionService,
    KeySuggestion,
    SuggestionService,
    apply_suggestion,
    create_suggestion_service
)

__all__ = [
    'GeminiSuggestionService',
    'HeuristicSuggestionService',
    'KeySuggestion',
    'SuggestionService',
    'apply_suggestion',
    'create_suggestion_service'
]
