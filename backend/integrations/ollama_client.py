"""
Ollama REST API backend.
Wraps POST /api/chat for a local model server; no API key needed.
"""
from typing import Optional

import httpx

from core.errors import GenerationEmptyResponse
from integrations.llm_provider import GenerationProvider
from models.generation import Completion


class OllamaProvider(GenerationProvider):
    name = "ollama"
    endpoint = "/api/chat"
    default_model = "qwen2.5-coder:3b"
    default_base_url = "http://localhost:11434"
    requires_api_key = False

    def _build_payload(self, system: str, user: str, max_tokens: int) -> dict:
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            "stream": False,
            "options": {
                "num_ctx": 4096,
                "num_predict": max_tokens,
                "temperature": 0,
            },
        }

    def _extract(self, body: dict) -> Completion:
        content = ((body.get("message") or {}).get("content") or "").strip()
        if not content:
            raise GenerationEmptyResponse("no text in response")
        tokens = int(body.get("prompt_eval_count") or 0) + int(body.get("eval_count") or 0)
        return Completion(text=content, tokens=tokens)

    def is_healthy(self) -> tuple[bool, Optional[str]]:
        """Returns (True, model_name) if Ollama is reachable, (False, error) otherwise."""
        try:
            resp = self.client.get(f"{self.base_url}/api/version", timeout=5)
            resp.raise_for_status()
            return True, self.model
        except httpx.HTTPError as e:
            return False, str(e)
