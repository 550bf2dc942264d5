"""
Provider-specific LLM client implementations.
"""

from .google_genai_client import GoogleGenAIClient

__all__ = [
    "GoogleGenAIClient",
]
