import argparse
import asyncio
import logging
import sys

from .config_loader import DEFAULT_CONFIG_FILE, apply_cli_overrides, load_config
from .config_models import AppConfig, ConfigError
from .llm.base import StreamTransportError
from .llm.factory import LLMClientFactory
from .processing import ProcessingService, ProcessingServiceConfig
from .prompts import DEFAULT_REVIEW_PROMPT
from .tools import build_default_registry

# --- Logging Configuration ---
logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=logging.INFO,
    stream=sys.stderr,
)
# Keep external libraries less verbose
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("google_genai").setLevel(logging.WARNING)
logger = logging.getLogger(__name__)


# --- Argument Parsing ---
parser = argparse.ArgumentParser(
    description="Review uncommitted code changes with a tool-using LLM agent"
)
parser.add_argument(
    "prompt",
    nargs="?",
    default=DEFAULT_REVIEW_PROMPT,
    help="Task for the agent (defaults to reviewing the current directory)",
)
parser.add_argument(
    "--config",
    default=DEFAULT_CONFIG_FILE,
    help="Path to the YAML configuration file",
)
parser.add_argument(
    "--model",
    default=None,  # Default is None, will be loaded from env/config
    help="LLM model identifier (overrides config file and environment variable)",
)
parser.add_argument(
    "--max-steps",
    type=int,
    default=None,
    help="Maximum number of tool rounds before the session stops",
)
parser.add_argument(
    "--log-level",
    default=None,
    help="Logging level (overrides config file and environment variable)",
)


def build_processing_service(config: AppConfig) -> ProcessingService:
    """Wire the LLM client, tool registry and loop configuration together."""
    llm_client = LLMClientFactory.create_client(config.llm_client_config())
    registry = build_default_registry(config)
    return ProcessingService(
        llm_client=llm_client,
        registry=registry,
        config=ProcessingServiceConfig(max_steps=config.max_steps),
    )


async def stream_review(service: ProcessingService, prompt: str) -> None:
    """Run the agent, writing model text to stdout as it arrives."""
    async for event in service.process_prompt_stream(prompt):
        if event.type == "content" and event.content:
            sys.stdout.write(event.content)
            sys.stdout.flush()
        elif event.type == "tool_result":
            logger.info(
                f"Tool '{(event.metadata or {}).get('tool_name')}' finished"
                f"{' with an error' if (event.metadata or {}).get('is_error') else ''}"
            )
        elif event.type == "done":
            metadata = event.metadata or {}
            logger.info(
                f"Session finished: {metadata.get('termination_reason')} "
                f"after {metadata.get('steps')} step(s)"
            )
    sys.stdout.write("\n")


def main() -> int:
    """Loads config, parses args and runs one review session."""
    args = parser.parse_args()

    try:
        config = load_config(args.config)
        config = apply_cli_overrides(
            config,
            model=args.model,
            max_steps=args.max_steps,
            log_level=args.log_level,
        )
    except ConfigError as config_err:
        logger.critical(f"Configuration error during startup: {config_err}")
        return 1

    logging.getLogger().setLevel(config.log_level)

    try:
        service = build_processing_service(config)
    except ValueError as config_err:
        logger.critical(f"Configuration error during startup: {config_err}")
        return 1

    try:
        asyncio.run(stream_review(service, args.prompt))
    except StreamTransportError as e:
        logger.critical(f"Model stream failed ({e.error_type}): {e}")
        return 1
    except KeyboardInterrupt:
        logger.warning("Interrupted, review cancelled.")
        return 130

    return 0


if __name__ == "__main__":
    sys.exit(main())
