"""OpenAI chat completion generator."""

from dataclasses import dataclass

from openai import OpenAI

from .config import config
from .errors import UpstreamError, is_transient

logger = config.get_logger(__name__)


@dataclass(frozen=True)
class GenerationConfig:
    """Sampling overrides for a single generation call."""

    temperature: float = 0.7
    top_p: float = 0.95
    max_output_tokens: int = 1024


class ChatGenerator:
    """Turns a prompt string into generated text."""

    def __init__(self, api_key: str | None = None, model: str | None = None) -> None:
        """Initialize the generator.

        Args:
            api_key: OpenAI API key. If None, reads OPENAI_API_KEY.
            model: Chat model name. If None, uses config.CHAT_MODEL.
        """
        api_key = api_key or config.get_openai_api_key()
        if not api_key:
            logger.warning(
                "OPENAI_API_KEY not found in environment variables. "
                "Generation calls will fail until it is set."
            )
        self.api_key = api_key
        self.client = OpenAI(
            api_key=api_key or "missing-key", base_url=config.OPENAI_BASE_URL
        )
        self.model = model or config.CHAT_MODEL

    def generate(self, prompt_text: str) -> str:
        """Generate a completion with the configured sampling settings.

        Raises:
            UpstreamError: If the key is missing or the provider call fails.
        """
        return self._complete(
            prompt_text,
            temperature=config.CHAT_TEMPERATURE,
            max_tokens=config.CHAT_MAX_TOKENS,
        )

    def generate_with_config(
        self, prompt_text: str, generation_config: GenerationConfig
    ) -> str:
        """Generate a completion with explicit sampling settings."""
        return self._complete(
            prompt_text,
            temperature=generation_config.temperature,
            top_p=generation_config.top_p,
            max_tokens=generation_config.max_output_tokens,
        )

    def _complete(self, prompt_text: str, **sampling: float) -> str:
        if not self.api_key:
            msg = "OPENAI_API_KEY is not configured. Please add it to your .env file."
            raise UpstreamError(msg)

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt_text}],
                **sampling,
            )
        except Exception as exc:
            logger.exception("Error generating response with model %s", self.model)
            msg = f"Generation request failed: {exc}"
            raise UpstreamError(msg, transient=is_transient(exc)) from exc

        content = response.choices[0].message.content
        return content or ""
