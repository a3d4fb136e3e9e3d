from __future__ import annotations

import json
import logging
import threading
import time
from dataclasses import dataclass
from typing import Dict, Iterator, Optional

import requests
from pydantic import BaseModel

from ..core import raise_if_cancelled

logger = logging.getLogger(__name__)


class LLMResponse(BaseModel):
    content: Optional[str] = None
    finish_reason: str
    usage: Optional[Dict[str, int]] = None
    time_taken: float
    error: str | None = None


@dataclass
class LLMConfig:
    host: str = "http://127.0.0.1:11434"
    model: str = "gpt-oss:20b"
    advanced_model: str = "gemma3:27b"
    temperature: float = 0.1
    timeout: int = 120

    @classmethod
    def from_config(cls, cfg: Dict) -> "LLMConfig":
        ollama_cfg = cfg.get("ollama", {})
        defaults = cls()
        return cls(
            host=ollama_cfg.get("host", defaults.host),
            model=ollama_cfg.get("chat_model", defaults.model),
            advanced_model=ollama_cfg.get("advanced_chat_model", defaults.advanced_model),
            temperature=float(ollama_cfg.get("temperature", defaults.temperature)),
            timeout=int(ollama_cfg.get("timeout", defaults.timeout)),
        )


class LlmClient:
    """Answer-generation service contract."""

    def stream(
        self,
        prompt: str,
        advanced: bool = False,
        cancel: Optional[threading.Event] = None,
    ) -> Iterator[str]:
        raise NotImplementedError

    def ask(self, prompt: str, advanced: bool = False) -> LLMResponse:
        start_time = time.time()
        try:
            content = "".join(self.stream(prompt, advanced=advanced))
        except Exception as e:
            return LLMResponse(
                finish_reason="error",
                time_taken=time.time() - start_time,
                error=str(e),
            )
        return LLMResponse(
            content=content.strip(),
            finish_reason="stop",
            time_taken=time.time() - start_time,
        )


class OllamaChatClient(LlmClient):

    def __init__(self, config: LLMConfig | None = None):
        self.config = config or LLMConfig()
        self.session = requests.Session()

    def _payload(self, prompt: str, advanced: bool) -> Dict:
        return {
            "model": self.config.advanced_model if advanced else self.config.model,
            "messages": [{"role": "user", "content": prompt}],
            "stream": True,
            "options": {"temperature": self.config.temperature},
        }

    def stream(
        self,
        prompt: str,
        advanced: bool = False,
        cancel: Optional[threading.Event] = None,
    ) -> Iterator[str]:
        url = f"{self.config.host.rstrip('/')}/api/chat"
        with self.session.post(
            url,
            json=self._payload(prompt, advanced),
            stream=True,
            timeout=self.config.timeout,
        ) as response:
            response.raise_for_status()
            for line in response.iter_lines(decode_unicode=True):
                raise_if_cancelled(cancel)
                if not line:
                    continue
                data = json.loads(line)
                if data.get("error"):
                    raise RuntimeError(f"Ollama error: {data['error']}")
                piece = (data.get("message") or {}).get("content", "")
                if piece:
                    yield piece
                if data.get("done"):
                    break


def create_client(cfg: Optional[Dict] = None) -> OllamaChatClient:
    """Create chat client from config (Wrapper)."""
    return OllamaChatClient(LLMConfig.from_config(cfg or {}))
