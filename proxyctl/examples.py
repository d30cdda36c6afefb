"""Connection snippets for clients of the proxy."""

from __future__ import annotations

import json
from typing import Optional

from .catalog import is_image_capable
from .models import (
    DEFAULT_PROXY_PORT,
    ApplicationConfig,
    ChatCompletionRequest,
    ChatMessage,
    ClientExamples,
    RuntimeStatus,
)

API_KEY_PLACEHOLDER = "YOUR_API_KEY"
TEXT_PROMPT = "Hello"
IMAGE_PROMPT = "Draw a futuristic city"


def resolve_port(
    status: Optional[RuntimeStatus],
    config: Optional[ApplicationConfig],
    default_port: int = DEFAULT_PROXY_PORT,
) -> int:
    """Actual listening port when the service runs, otherwise the desired one."""
    if status is not None and status.running and status.port:
        return status.port
    if config is not None:
        return config.proxy.port
    return default_port


def resolve_api_key(config: Optional[ApplicationConfig]) -> str:
    if config is not None and config.proxy.api_key:
        return config.proxy.api_key
    return API_KEY_PLACEHOLDER


def build_example_request(model_id: str) -> ChatCompletionRequest:
    if is_image_capable(model_id):
        message = ChatMessage(role="user", content=[{"type": "text", "text": IMAGE_PROMPT}])
    else:
        message = ChatMessage(role="user", content=TEXT_PROMPT)
    return ChatCompletionRequest(model=model_id, messages=[message])


def _curl_snippet(base_url: str, api_key: str, request: ChatCompletionRequest) -> str:
    body = json.dumps(request.model_dump(exclude_none=True), indent=2, ensure_ascii=False)
    return (
        f"curl {base_url}/v1/chat/completions \\\n"
        '  -H "Content-Type: application/json" \\\n'
        f'  -H "Authorization: Bearer {api_key}" \\\n'
        f"  -d '{body}'"
    )


def _python_snippet(base_url: str, api_key: str, request: ChatCompletionRequest) -> str:
    messages = json.dumps(
        [message.model_dump() for message in request.messages], indent=4, ensure_ascii=False
    ).replace("\n", "\n    ")
    return (
        "from openai import OpenAI\n"
        "\n"
        "client = OpenAI(\n"
        f'    base_url="{base_url}/v1",\n'
        f'    api_key="{api_key}"\n'
        ")\n"
        "\n"
        "response = client.chat.completions.create(\n"
        f'    model="{request.model}",\n'
        f"    messages={messages}\n"
        ")\n"
        "\n"
        "print(response.choices[0].message.content)"
    )


def generate(
    model_id: str,
    status: Optional[RuntimeStatus],
    config: Optional[ApplicationConfig],
    default_port: int = DEFAULT_PROXY_PORT,
) -> ClientExamples:
    """
    Build a curl request and a Python client snippet for ``model_id``.

    Pure function: the port prefers the observed status over the desired
    config, then ``default_port``. The key falls back to a placeholder when
    no config is loaded.
    """
    base_url = f"http://localhost:{resolve_port(status, config, default_port)}"
    api_key = resolve_api_key(config)
    request = build_example_request(model_id)
    return ClientExamples(
        model_id=model_id,
        request_snippet=_curl_snippet(base_url, api_key, request),
        client_snippet=_python_snippet(base_url, api_key, request),
    )
