"""Hugging Face Inference API text-generation provider."""

from __future__ import annotations

import time

import httpx

from yakap.core.llm.provider import ProviderResponse

DEFAULT_HF_BASE_URL = "https://api-inference.huggingface.co/models"


class HuggingFaceProvider:
    """Text-generation models served by the hosted Inference API.

    These models continue a prompt rather than follow chat roles, so the
    system message is prepended to the user message.
    """

    name = "huggingface"
    output_style = "text"

    def __init__(
        self,
        api_key: str,
        model: str = "gpt2",
        base_url: str = DEFAULT_HF_BASE_URL,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.model = model
        self.base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._transport = transport

    async def generate(
        self,
        system_message: str,
        user_message: str,
        max_tokens: int = 200,
        temperature: float = 0.7,
    ) -> ProviderResponse:
        prompt = f"{system_message}\n\n{user_message}" if system_message else user_message
        start = time.monotonic()
        async with httpx.AsyncClient(transport=self._transport, timeout=30.0) as client:
            resp = await client.post(
                f"{self.base_url}/{self.model}",
                headers={"Authorization": f"Bearer {self._api_key}"},
                json={
                    "inputs": prompt,
                    "parameters": {
                        "max_new_tokens": max_tokens,
                        "temperature": temperature,
                        "do_sample": True,
                        "return_full_text": False,
                    },
                },
            )
        resp.raise_for_status()
        elapsed_ms = (time.monotonic() - start) * 1000

        payload = resp.json()
        content = ""
        if isinstance(payload, list) and payload and isinstance(payload[0], dict):
            content = payload[0].get("generated_text") or ""
        elif isinstance(payload, dict):
            content = payload.get("generated_text") or ""

        return ProviderResponse(
            content=content,
            input_tokens=len(prompt.split()),
            output_tokens=len(content.split()),
            model=self.model,
            latency_ms=elapsed_ms,
        )
