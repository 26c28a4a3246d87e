from openai import OpenAI

from .log import get_logger
from .retry import with_retries

logger = get_logger("llm")


class ChatGenerator:
    """
    Send a single prompt to an OpenAI chat model and return the reply text.
    """

    def __init__(
        self,
        client: OpenAI,
        model: str,
        temperature: float = 0.1,
        max_output_tokens: int = 800,
        max_retries: int = 3,
    ) -> None:
        self._client = client
        self.model = model
        self._temperature = temperature
        self._max_output_tokens = max_output_tokens
        self._max_retries = max_retries

    def generate(self, prompt: str) -> str:
        logger.debug(f"Calling {self.model} with a {len(prompt)}-character prompt")
        resp = with_retries(
            lambda: self._client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                max_tokens=self._max_output_tokens,
                temperature=self._temperature,
            ),
            max_attempts=self._max_retries,
        )
        return (resp.choices[0].message.content or "").strip()
