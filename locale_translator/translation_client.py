"""Language-model translation of single entries with fixed-backoff retries."""
import logging
import time
from typing import Callable, Optional

from openai import OpenAI, OpenAIError
from openai.types.chat import (
    ChatCompletionSystemMessageParam,
    ChatCompletionUserMessageParam
)

logger = logging.getLogger(__name__)

DEFAULT_API_BASE_URL = 'https://api.groq.com/openai/v1'
DEFAULT_MODEL_NAME = 'llama-3.1-70b-versatile'
DEFAULT_TEMPERATURE = 0.5
DEFAULT_MAX_TOKENS = 2000
DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_ATTEMPT_DELAY = 1.0
DEFAULT_RETRY_DELAY = 10.0
DEFAULT_REQUEST_TIMEOUT = 60.0

SYSTEM_PROMPT = """You are a translation assistant. Your task is to translate the given content to the specified locale.
- Consider that the context is an ecommerce software/website. For example (in italian) "run" should be translated to "esegui", not "corri". Use this same logic for every language.
- Think about the context (ecommerce website/software/platform) and make sure your translation makes sense in the context
- Only output the translated content, nothing else, no comments or anything
- Every time you see the word openmage or magento, translate it to Maho
- Try not to translate specific terms like "url rewrites" or "layered navigation" or others that may sound weird in the target language
- Maintain the casing of the words if possible
- Preserve any special characters or formatting in the original text
- You have to translate every message you receive, whatever it means"""

USER_PROMPT = 'Translate the following content to {locale}:\n\n"{content}"'


class TranslationError(Exception):
    """Raised when an entry could not be translated within the attempt budget."""


def strip_wrapping_quotes(text: str) -> str:
    """Remove one pair of double quotes wrapping the whole text, if present."""
    if text.startswith('"') and text.endswith('"'):
        return text[1:-1]
    return text


def restore_edge_whitespace(original: str, translated: str) -> str:
    """
    Pad the translation so it keeps at least the original's edge whitespace.

    Models tend to trim leading and trailing spaces, which are often layout
    significant in UI strings. Missing whitespace is restored as spaces.

    Args:
        original (str): The source content.
        translated (str): The candidate translation.

    Returns:
        str: The translation with at least as much leading and trailing whitespace.
    """
    leading = len(original) - len(original.lstrip())
    trailing = len(original) - len(original.rstrip())
    translated_leading = len(translated) - len(translated.lstrip())
    translated_trailing = len(translated) - len(translated.rstrip())

    if translated_leading < leading:
        translated = ' ' * (leading - translated_leading) + translated
    if translated_trailing < trailing:
        translated += ' ' * (trailing - translated_trailing)
    return translated


def normalize_translation(original: str, translated: str) -> str:
    """
    Clean a raw model answer.

    Raises:
        ValueError: If nothing is left once the wrapping quotes are removed.
    """
    translated = strip_wrapping_quotes(translated)
    if not translated:
        raise ValueError("Empty translation received")
    return restore_edge_whitespace(original, translated)


def build_messages(content: str, locale: str) -> list:
    return [
        ChatCompletionSystemMessageParam(role="system", content=SYSTEM_PROMPT),
        ChatCompletionUserMessageParam(role="user", content=USER_PROMPT.format(locale=locale, content=content))
    ]


def extract_message_content(response) -> str:
    """
    Read ``choices[0].message.content`` from a chat completion.

    Raises:
        ValueError: If the response does not carry text at that path.
    """
    try:
        content = response.choices[0].message.content
    except (AttributeError, IndexError, TypeError) as shape_exc:
        raise ValueError("Unexpected API response format") from shape_exc
    if not isinstance(content, str):
        raise ValueError("Unexpected API response format")
    return content


class TranslationClient:
    """
    Translate single entries through an OpenAI-compatible chat completions API.

    Every attempt is preceded by ``attempt_delay`` seconds and every failed
    attempt that will be retried is followed by ``retry_delay`` seconds. The
    ``sleep`` callable is injectable so tests can skip real waiting.
    """

    def __init__(
            self,
            client: OpenAI,
            model_name: str = DEFAULT_MODEL_NAME,
            temperature: float = DEFAULT_TEMPERATURE,
            max_tokens: int = DEFAULT_MAX_TOKENS,
            max_attempts: int = DEFAULT_MAX_ATTEMPTS,
            attempt_delay: float = DEFAULT_ATTEMPT_DELAY,
            retry_delay: float = DEFAULT_RETRY_DELAY,
            sleep: Callable[[float], None] = time.sleep
    ):
        self.client = client
        self.model_name = model_name
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.max_attempts = max_attempts
        self.attempt_delay = attempt_delay
        self.retry_delay = retry_delay
        self.sleep = sleep

    @classmethod
    def from_api_key(
            cls,
            api_key: str,
            base_url: str = DEFAULT_API_BASE_URL,
            timeout: float = DEFAULT_REQUEST_TIMEOUT,
            **kwargs
    ) -> 'TranslationClient':
        # The attempt budget is enforced here, not by the SDK
        client = OpenAI(api_key=api_key, base_url=base_url, timeout=timeout, max_retries=0)
        return cls(client, **kwargs)

    def request_translation(self, content: str, locale: str) -> str:
        """Perform a single API call and return the normalized translation."""
        response = self.client.chat.completions.create(
            model=self.model_name,
            messages=build_messages(content, locale),
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )
        return normalize_translation(content, extract_message_content(response))

    def translate(self, content: str, locale: str) -> str:
        """
        Translate ``content`` into ``locale``.

        Args:
            content (str): The source text, sent unmodified.
            locale (str): The target locale code.

        Returns:
            str: The normalized translation.

        Raises:
            TranslationError: If every attempt failed. The last failure is chained as the cause.
        """
        logger.info("Using AI for: %s", content)

        last_error: Optional[Exception] = None
        for attempt in range(1, self.max_attempts + 1):
            self.sleep(self.attempt_delay)
            try:
                return self.request_translation(content, locale)
            except (OpenAIError, ValueError) as api_exc:
                last_error = api_exc
                logger.error("API Error: %s - %s", api_exc.__class__.__name__, api_exc)

            if attempt < self.max_attempts:
                logger.info("Retrying in %s seconds (Attempt %d/%d)...", self.retry_delay, attempt, self.max_attempts)
                self.sleep(self.retry_delay)

        logger.error("Max retries reached for content: %s", content)
        raise TranslationError(
            f"Failed to translate content after {self.max_attempts} attempts: {last_error}"
        ) from last_error
