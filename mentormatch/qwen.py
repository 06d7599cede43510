"""Client for the DashScope (Qwen) text-generation HTTP API."""

from typing import Any, Dict, Optional

import requests

from .errors import LLMError
from .logger import get_logger

logger = get_logger()

DASHSCOPE_ENDPOINT = "https://dashscope.aliyuncs.com/api/v1/services/aigc/text-generation/generation"


def extract_text(data: Any) -> Optional[str]:
    """Pull generated text out of a response body.

    Newer models answer in `output.text`; older ones in
    `output.choices[0].message.content` or `output.choices[0].text`.
    """
    if not isinstance(data, dict):
        return None
    output = data.get("output")
    if not isinstance(output, dict):
        return None

    text = output.get("text")
    if isinstance(text, str) and text.strip():
        return text.strip()

    choices = output.get("choices")
    if isinstance(choices, list) and choices and isinstance(choices[0], dict):
        first = choices[0]
        message = first.get("message")
        if isinstance(message, dict) and isinstance(message.get("content"), str) and message["content"].strip():
            return message["content"].strip()
        if isinstance(first.get("text"), str) and first["text"].strip():
            return first["text"].strip()
    return None


def describe_error(data: Any) -> str:
    """Best available error message from a failed response body."""
    if not isinstance(data, dict):
        return "Response body is not a JSON object"
    output = data.get("output")
    if data.get("message"):
        return str(data["message"])
    if isinstance(output, dict) and isinstance(output.get("error"), dict) and output["error"].get("message"):
        return str(output["error"]["message"])
    if isinstance(data.get("error"), dict) and data["error"].get("message"):
        return str(data["error"]["message"])
    if data.get("code"):
        return f"Error code: {data['code']}"
    if output is None:
        return "Response is missing the 'output' field"
    return "Response 'output' has neither 'text' nor 'choices'"


class QwenClient:
    """Thin wrapper over the DashScope generation endpoint. Never retries."""

    def __init__(
        self,
        api_key: str,
        model: str = "qwen-turbo",
        endpoint: str = DASHSCOPE_ENDPOINT,
        timeout: float = 30.0,
    ):
        self.api_key = api_key
        self.model = model
        self.endpoint = endpoint
        self.timeout = timeout

    def _headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
            "X-DashScope-Token": self.api_key,
        }

    def build_body(self, prompt: str, temperature: float, max_tokens: int) -> Dict[str, Any]:
        return {
            "model": self.model,
            "input": {"messages": [{"role": "user", "content": prompt}]},
            "parameters": {"temperature": temperature, "max_tokens": max_tokens},
        }

    def generate(self, prompt: str, temperature: float = 0.7, max_tokens: int = 2000) -> str:
        """Send a single-turn prompt and return the generated text.

        Raises:
            LLMError: on timeout, connection failure, non-2xx status, or a
                body without usable text
        """
        logger.record_llm_call()
        body = self.build_body(prompt, temperature, max_tokens)
        logger.debug("Calling DashScope", model=self.model, prompt_chars=len(prompt))
        try:
            resp = requests.post(self.endpoint, json=body, headers=self._headers(), timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            raise LLMError(f"DashScope request timed out after {self.timeout}s") from e
        except requests.exceptions.RequestException as e:
            raise LLMError(f"DashScope request error: {e}") from e

        try:
            data = resp.json()
        except ValueError:
            data = None

        text = extract_text(data) if resp.ok else None
        if text is None:
            message = describe_error(data)
            logger.error(
                "DashScope call failed",
                status=resp.status_code,
                message=message,
                preview=(resp.text or "")[:500],
            )
            raise LLMError(f"DashScope call failed: {message}", status=resp.status_code)

        logger.debug("DashScope call succeeded", status=resp.status_code, chars=len(text))
        return text
