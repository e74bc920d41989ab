"""
OpenAI-compatible chat completions backend.
Works with OpenAI, OpenRouter, Together, Groq and other compatible services.
"""
from core.errors import GenerationEmptyResponse
from integrations.llm_provider import GenerationProvider
from models.generation import Completion


class OpenAIProvider(GenerationProvider):
    name = "openai"
    endpoint = "/chat/completions"
    default_model = "gpt-4o"
    default_base_url = "https://api.openai.com/v1"

    def _headers(self) -> dict:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }

    def _build_payload(self, system: str, user: str, max_tokens: int) -> dict:
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            "max_completion_tokens": max_tokens,
            "temperature": 0,
        }

    def _extract(self, body: dict) -> Completion:
        choices = body.get("choices") or []
        if not choices:
            raise GenerationEmptyResponse("no response from model")
        content = ((choices[0] or {}).get("message") or {}).get("content") or ""
        if not content.strip():
            raise GenerationEmptyResponse("no text in response")

        usage = body.get("usage") or {}
        tokens = int(usage.get("prompt_tokens") or 0) + int(usage.get("completion_tokens") or 0)
        if not tokens:
            tokens = int(usage.get("total_tokens") or 0)
        return Completion(text=content, tokens=tokens)
