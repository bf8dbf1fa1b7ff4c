"""
Key column suggestions for two header lists.

excel_lookup_matcher/suggestions/suggestion_service.py

A suggestion only pre-fills the key selection. Services return None when
they have nothing useful to say, and never raise: a failing suggestion must
not stop a match that the user can configure by hand.
"""

import os
import re
import json
import logging

from abc import ABC, abstractmethod
from dataclasses import dataclass
from difflib import SequenceMatcher
from typing import Optional

import requests


logger = logging.getLogger(__name__)

# Header words that usually mark an identifying column
ID_TOKENS = {'id', 'key', 'code', 'sku', 'email', 'number', 'no', 'num', 'ref', 'uuid', 'account'}

GEMINI_API_URL = 'https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent'
DEFAULT_GEMINI_MODEL = 'gemini-2.5-flash'


@dataclass
class KeySuggestion:
    """Proposed key pair with a short explanation."""
    left_key: str
    right_key: str
    reasoning: str = ''


class SuggestionService(ABC):
    """Proposes which columns of two tables refer to the same entity."""

    @abstractmethod
    def suggest(self, left_label: str, left_headers: list,
                right_label: str, right_headers: list) -> Optional[KeySuggestion]:
        """
        Suggest a key column pair.

        Args:
            left_label: Display name of the master table (e.g. file name)
            left_headers: Master table headers
            right_label: Display name of the lookup table
            right_headers: Lookup table headers

        Returns:
            KeySuggestion, or None when no suggestion is available
        """
        pass


def apply_suggestion(suggestion: Optional[KeySuggestion], left_headers: list, right_headers: list) -> tuple:
    """
    Keys to pre-fill from a suggestion.

    Returns:
        (left_key, right_key), each None unless it is an existing header
    """
    if suggestion is None:
        return None, None

    left_key = suggestion.left_key if suggestion.left_key in left_headers else None
    right_key = suggestion.right_key if suggestion.right_key in right_headers else None

    if left_key is None or right_key is None:
        logger.debug(f"Ignoring suggested keys not present in headers: "
                     f"'{suggestion.left_key}' / '{suggestion.right_key}'")

    return left_key, right_key


def _header_tokens(header: str) -> list:
    """Split a header into lower-case words ('CustomerID' -> ['customer', 'id'])."""
    spaced = re.sub(r'([a-z0-9])([A-Z])', r'\1 \2', str(header))
    return re.findall(r'[a-z0-9]+', spaced.lower())


class HeuristicSuggestionService(SuggestionService):
    """
    Offline suggestion based on header name similarity.

    Scores every header pair by SequenceMatcher ratio of their compacted
    names, with a bonus when both look like identifiers.
    """

    def __init__(self, min_score: float = 0.6, id_bonus: float = 0.2):
        self.min_score = min_score
        self.id_bonus = id_bonus

    def suggest(self, left_label, left_headers, right_label, right_headers):
        best = None
        best_score = 0.0

        for left_header in left_headers:
            for right_header in right_headers:
                score = self.score_pair(left_header, right_header)
                if score > best_score:
                    best = (left_header, right_header)
                    best_score = score

        if best is None or best_score < self.min_score:
            logger.debug(f"No header pair scored above {self.min_score} (best: {best_score:.2f})")
            return None

        left_key, right_key = best
        reasoning = (f"'{left_key}' in {left_label} and '{right_key}' in {right_label} "
                     f"have the most similar names (score {best_score:.2f})")
        if self._is_identifier(left_key) and self._is_identifier(right_key):
            reasoning += " and both look like identifiers"

        return KeySuggestion(left_key=left_key, right_key=right_key, reasoning=reasoning)

    def score_pair(self, left_header: str, right_header: str) -> float:
        """Similarity of two header names, identifier bonus included."""
        left_compact = ''.join(_header_tokens(left_header))
        right_compact = ''.join(_header_tokens(right_header))

        if not left_compact or not right_compact:
            return 0.0

        score = SequenceMatcher(None, left_compact, right_compact).ratio()

        if self._is_identifier(left_header) and self._is_identifier(right_header):
            score += self.id_bonus

        return score

    @staticmethod
    def _is_identifier(header: str) -> bool:
        tokens = _header_tokens(header)
        return any(token in ID_TOKENS for token in tokens) or (bool(tokens) and tokens[-1].endswith('id'))


class GeminiSuggestionService(SuggestionService):
    """
    Asks a Gemini model for the most likely key pair.

    The API key comes from GEMINI_API_KEY (or API_KEY); without one the
    service is disabled and always returns None.
    """

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None, timeout: int = 30):
        self.api_key = api_key or os.environ.get('GEMINI_API_KEY') or os.environ.get('API_KEY')
        self.model = model or os.environ.get('GEMINI_MODEL') or DEFAULT_GEMINI_MODEL
        self.timeout = timeout

    @property
    def available(self) -> bool:
        return bool(self.api_key)

    def suggest(self, left_label, left_headers, right_label, right_headers):
        if not self.available:
            logger.warning("No API key found for Gemini suggestions (set GEMINI_API_KEY)")
            return None

        try:
            response = requests.post(
                GEMINI_API_URL.format(model=self.model),
                headers={'Content-Type': 'application/json', 'x-goog-api-key': self.api_key},
                json=self._build_request(left_label, left_headers, right_label, right_headers),
                timeout=self.timeout,
            )
            response.raise_for_status()
            return self._parse_response(response.json())

        except requests.RequestException as e:
            logger.warning(f"Gemini suggestion request failed: {e}")
        except (ValueError, KeyError, IndexError, TypeError, AttributeError) as e:
            logger.warning(f"Gemini suggestion response could not be read: {e}")

        return None

    def _build_request(self, left_label, left_headers, right_label, right_headers) -> dict:
        prompt = (
            "I have two Excel files that need to be joined (VLOOKUP style).\n\n"
            f"File 1 (Left Table): \"{left_label}\"\n"
            f"Headers: {json.dumps(list(left_headers))}\n\n"
            f"File 2 (Right Table/Lookup): \"{right_label}\"\n"
            f"Headers: {json.dumps(list(right_headers))}\n\n"
            "Identify the most likely \"Key\" column from both files that refers to the same entity "
            "(e.g., ID, Email, SKU, Name) to use for joining.\n"
            "Return the exact header name for both."
        )

        return {
            'contents': [{'parts': [{'text': prompt}]}],
            'generationConfig': {
                'responseMimeType': 'application/json',
                'responseSchema': {
                    'type': 'OBJECT',
                    'properties': {
                        'leftKey': {'type': 'STRING', 'description': 'The exact header name from File 1 to use as key'},
                        'rightKey': {'type': 'STRING', 'description': 'The exact header name from File 2 to use as key'},
                        'reasoning': {'type': 'STRING', 'description': 'Short explanation of why these columns match'},
                    },
                    'required': ['leftKey', 'rightKey', 'reasoning'],
                },
            },
        }

    def _parse_response(self, payload: dict) -> Optional[KeySuggestion]:
        """Pull the JSON answer out of a generateContent response."""
        text = payload['candidates'][0]['content']['parts'][0].get('text')
        if not text:
            return None

        answer = json.loads(text)
        left_key = answer.get('leftKey')
        right_key = answer.get('rightKey')

        if not isinstance(left_key, str) or not isinstance(right_key, str):
            logger.warning("Gemini suggestion is missing leftKey/rightKey")
            return None

        return KeySuggestion(left_key=left_key, right_key=right_key, reasoning=str(answer.get('reasoning', '')))


def create_suggestion_service(name: str) -> Optional[SuggestionService]:
    """Service for a --suggest choice ('heuristic', 'gemini' or 'none')."""
    if not name or name == 'none':
        return None
    if name == 'heuristic':
        return HeuristicSuggestionService()
    if name == 'gemini':
        return GeminiSuggestionService()
    raise ValueError(f"Unknown suggestion service '{name}'. Valid options: heuristic, gemini, none")


# End of file #
