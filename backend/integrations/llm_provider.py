"""
Generation provider contract.

A provider turns a system instruction plus a user message into raw text over
HTTP. Backends differ only in wire encoding and response envelope; transport
handling, status mapping, token defaults and parsing live here. No retries:
one HTTP call per generation.
"""
import logging
from abc import ABC, abstractmethod
from typing import Optional

import httpx

from core.errors import GenerationEmptyResponse, GenerationTimeout, GenerationTransportFailed
from core.response_parser import parse_response
from models.generation import Completion, GenerateRequest, GenerateResponse
from prompts.sql_generation import build_instruction

logger = logging.getLogger(__name__)

DEFAULT_MAX_TOKENS = 1024
DEFAULT_TIMEOUT_SECONDS = 60


class GenerationProvider(ABC):
    """Base class for LLM backends. Subclasses define the wire format."""

    name: str = ""
    endpoint: str = ""
    default_model: str = ""
    default_base_url: str = ""
    requires_api_key: bool = True

    def __init__(
        self,
        api_key: str = "",
        model: str = "",
        base_url: str = "",
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        default_max_tokens: int = DEFAULT_MAX_TOKENS,
        client: Optional[httpx.Client] = None,
    ):
        self.api_key = api_key
        self.model = model or self.default_model
        self.base_url = (base_url or self.default_base_url).rstrip("/")
        self.default_max_tokens = default_max_tokens if default_max_tokens > 0 else DEFAULT_MAX_TOKENS
        self.client = client or httpx.Client(timeout=timeout)

    # ── Wire format ───────────────────────────────────────────────────────────

    def _headers(self) -> dict:
        return {"Content-Type": "application/json"}

    @abstractmethod
    def _build_payload(self, system: str, user: str, max_tokens: int) -> dict:
        ...

    @abstractmethod
    def _extract(self, body: dict) -> Completion:
        """Pull text and token usage out of a success body, or raise GenerationEmptyResponse."""

    def _error_message(self, resp: httpx.Response) -> str:
        try:
            body = resp.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            err = body.get("error")
            if isinstance(err, dict) and err.get("message"):
                return err["message"]
            if isinstance(err, str) and err:
                return err
        return f"API returned status {resp.status_code}"

    # ── Calls ─────────────────────────────────────────────────────────────────

    def complete(self, system: str, user: str, max_tokens: Optional[int] = None) -> Completion:
        """Single HTTP round trip returning the raw model text."""
        if not max_tokens or max_tokens <= 0:
            max_tokens = self.default_max_tokens
        payload = self._build_payload(system, user, max_tokens)
        url = f"{self.base_url}{self.endpoint}"

        try:
            resp = self.client.post(url, json=payload, headers=self._headers())
        except httpx.TimeoutException as e:
            raise GenerationTimeout(f"{self.name} request timed out") from e
        except httpx.HTTPError as e:
            raise GenerationTransportFailed(f"{self.name} request failed: {e}") from e

        if not resp.is_success:
            message = self._error_message(resp)
            logger.warning("%s returned %d: %s", self.name, resp.status_code, message)
            raise GenerationTransportFailed(message)

        try:
            body = resp.json()
        except ValueError as e:
            raise GenerationTransportFailed("failed to parse response") from e
        if not isinstance(body, dict):
            raise GenerationEmptyResponse("no response from model")

        completion = self._extract(body)
        logger.debug("%s response: %d chars, %d tokens", self.name, len(completion.text), completion.tokens)
        return completion

    def generate(self, request: GenerateRequest) -> GenerateResponse:
        system = request.system or build_instruction(request.schema_text)
        completion = self.complete(system, request.prompt, request.max_tokens)
        parsed = parse_response(completion.text)
        return parsed.model_copy(update={"tokens": completion.tokens})

    # ── Lifecycle ─────────────────────────────────────────────────────────────

    def close(self):
        self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, *_):
        self.close()
