"""External service clients."""

from .credentials import CredentialProvider, SessionKeyProvider
from .gemini_client import AnswerMatch, GeminiGateway

__all__ = [
    "AnswerMatch",
    "CredentialProvider",
    "GeminiGateway",
    "SessionKeyProvider",
]
