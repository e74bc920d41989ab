"""Anthropic Messages API backend."""
from core.errors import GenerationEmptyResponse
from integrations.llm_provider import GenerationProvider
from models.generation import Completion

ANTHROPIC_API_VERSION = "2023-06-01"


class AnthropicProvider(GenerationProvider):
    name = "anthropic"
    endpoint = "/messages"
    default_model = "claude-sonnet-4-20250514"
    default_base_url = "https://api.anthropic.com/v1"

    def _headers(self) -> dict:
        return {
            "Content-Type": "application/json",
            "x-api-key": self.api_key,
            "anthropic-version": ANTHROPIC_API_VERSION,
        }

    def _build_payload(self, system: str, user: str, max_tokens: int) -> dict:
        return {
            "model": self.model,
            "system": system,
            "max_tokens": max_tokens,
            "messages": [{"role": "user", "content": user}],
        }

    def _extract(self, body: dict) -> Completion:
        blocks = body.get("content") or []
        if not blocks:
            raise GenerationEmptyResponse("no response from model")
        text = next((b.get("text") or "" for b in blocks if b.get("type") == "text"), "")
        if not text:
            raise GenerationEmptyResponse("no text in response")

        usage = body.get("usage") or {}
        tokens = int(usage.get("input_tokens") or 0) + int(usage.get("output_tokens") or 0)
        return Completion(text=text, tokens=tokens)
