"""OpenAI chat completions adapter (primary provider)."""

from typing import Any

from roadledger_gateway.models import ProviderId
from roadledger_gateway.providers.base import ProviderAdapter


class OpenAIAdapter(ProviderAdapter):
    """Vision extraction through the OpenAI chat completions API."""

    provider_id = ProviderId.OPENAI

    def build_request(
        self, api_key: str, prompt_text: str, image_base64: str, content_type: str
    ) -> tuple[str, dict[str, str], dict[str, Any]]:
        url = f"{self.base_url}/chat/completions"
        headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }
        body = {
            "model": self.model,
            "messages": [
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": prompt_text},
                        {
                            "type": "image_url",
                            "image_url": {
                                "url": f"data:{content_type};base64,{image_base64}",
                                "detail": "high",
                            },
                        },
                    ],
                }
            ],
            "max_tokens": self.max_tokens,
            "response_format": {"type": "json_object"},
        }
        return url, headers, body

    def extract_content(self, body: Any) -> str:
        return body["choices"][0]["message"]["content"]
