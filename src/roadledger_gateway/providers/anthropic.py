"""Anthropic messages adapter (secondary provider)."""

from typing import Any

from roadledger_gateway.models import ProviderId
from roadledger_gateway.providers.base import ProviderAdapter

JSON_ONLY_SUFFIX = "\n\nRespond with valid JSON only."

# Media types the messages API spells differently
MEDIA_TYPE_ALIASES = {"image/jpg": "image/jpeg"}


class AnthropicAdapter(ProviderAdapter):
    """Vision extraction through the Anthropic messages API.

    The answer is prose that usually wraps the JSON object, sometimes in
    a code fence, so the payload is located rather than parsed whole.
    """

    provider_id = ProviderId.ANTHROPIC

    def __init__(self, *args: Any, api_version: str = "2023-06-01", **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.api_version = api_version

    def build_request(
        self, api_key: str, prompt_text: str, image_base64: str, content_type: str
    ) -> tuple[str, dict[str, str], dict[str, Any]]:
        media_type = MEDIA_TYPE_ALIASES.get(content_type.lower(), content_type)
        url = f"{self.base_url}/messages"
        headers = {
            "x-api-key": api_key,
            "anthropic-version": self.api_version,
            "Content-Type": "application/json",
        }
        body = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "messages": [
                {
                    "role": "user",
                    "content": [
                        {
                            "type": "image",
                            "source": {
                                "type": "base64",
                                "media_type": media_type,
                                "data": image_base64,
                            },
                        },
                        {"type": "text", "text": prompt_text + JSON_ONLY_SUFFIX},
                    ],
                }
            ],
        }
        return url, headers, body

    def extract_content(self, body: Any) -> str:
        return body["content"][0]["text"]
