"""
Factory for creating appropriate LLM clients based on model configuration.
"""

import importlib
import logging
import os
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from code_review_agent.llm import LLMInterface

logger = logging.getLogger(__name__)


class LLMClientFactory:
    """
    Factory for creating LLM clients from the application's model configuration.

    The provider is taken from the config when given, otherwise inferred from
    the model name.
    """

    _provider_prefixes = {
        "gemini-": "google",
        "models/gemini-": "google",
    }

    # Provider classes will be imported on demand to avoid circular imports
    _provider_classes: dict[str, str] = {
        "google": "code_review_agent.llm.providers.google_genai_client.GoogleGenAIClient",
    }

    _api_key_env_vars = {
        "google": "GEMINI_API_KEY",
    }

    @classmethod
    def create_client(
        cls,
        config: dict[str, Any],
    ) -> "LLMInterface":
        """
        Create appropriate LLM client based on configuration.

        Args:
            config: LLM configuration dict containing:
                - model: Model identifier (required)
                - provider: Explicit provider name (optional)
                - api_key: API key (optional, will use env var if not provided)
                - model_parameters: Pattern-based parameters (optional)
                - Additional provider-specific parameters

        Returns:
            Instantiated LLM client

        Raises:
            ValueError: If model/provider is not recognized or no API key is available
        """
        model = config.get("model")
        if not model:
            raise ValueError("Model must be specified in config")

        provider = config.get("provider") or cls._determine_provider(model)
        if provider not in cls._provider_classes:
            raise ValueError(f"Unknown provider: {provider} for model: {model}")

        api_key = config.get("api_key") or cls._get_api_key_for_provider(provider)

        provider_params = {
            k: v
            for k, v in config.items()
            if k not in {"model", "provider", "api_key", "model_parameters"}
        }
        model_parameters = config.get("model_parameters") or {}

        module_path, class_name = cls._provider_classes[provider].rsplit(".", 1)
        client_class = getattr(importlib.import_module(module_path), class_name)

        logger.info(f"Creating {class_name} for model: {model}")
        return client_class(
            api_key=api_key,
            model=model,
            model_parameters=model_parameters,
            **provider_params,
        )

    @classmethod
    def _determine_provider(cls, model: str) -> str:
        """Determine provider from model string."""
        for prefix, provider in cls._provider_prefixes.items():
            if model.startswith(prefix):
                return provider

        # Explicit provider prefix (e.g., "google/gemini-2.5-flash")
        if "/" in model:
            provider, _ = model.split("/", 1)
            if provider in cls._provider_classes:
                return provider

        raise ValueError(f"Cannot determine provider for model: {model}")

    @classmethod
    def _get_api_key_for_provider(cls, provider: str) -> str:
        """Get API key from environment variables."""
        env_var = cls._api_key_env_vars.get(provider)
        if not env_var:
            raise ValueError(
                f"No environment variable mapping for provider: {provider}"
            )

        api_key = os.getenv(env_var)
        if not api_key:
            raise ValueError(f"API key not found in environment: {env_var}")

        return api_key
