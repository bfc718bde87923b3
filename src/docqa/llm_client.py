from __future__ import annotations

import logging
from typing import Optional

from openai import APIConnectionError, APITimeoutError, InternalServerError, OpenAI, RateLimitError
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from docqa.config import Settings, get_settings
from docqa.prompts import SYSTEM_PROMPT

log = logging.getLogger("docqa.llm")


class LLMClient:
    """
    Thin, safe wrapper around OpenAI for answering augmented prompts.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[OpenAI] = None,
        temperature: float = 0.2,
        max_output_tokens: int = 800,
    ) -> None:
        settings = settings or get_settings()
        self._client = client or OpenAI(api_key=settings.require_openai_key())
        self._model = settings.openai_model
        self._temperature = temperature
        self._max_output_tokens = max_output_tokens

    @property
    def model(self) -> str:
        return self._model

    @retry(
        retry=retry_if_exception_type((APIConnectionError, APITimeoutError, RateLimitError, InternalServerError)),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        stop=stop_after_attempt(3),
        reraise=True,
    )
    def complete(self, prompt: str) -> str:
        """
        Send prompt to the LLM and return the completion text.
        Retries on transient failures.
        """
        log.debug("Sending prompt to LLM (%s chars)", len(prompt))

        response = self._client.responses.create(
            model=self._model,
            input=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            temperature=self._temperature,
            max_output_tokens=self._max_output_tokens,
        )

        text = getattr(response, "output_text", None)
        if not text or not text.strip():
            raise RuntimeError("LLM response did not contain text output")

        log.debug("Raw LLM output: %s", text)
        return text.strip()
