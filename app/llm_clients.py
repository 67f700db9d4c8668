import base64
import io
import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any, List, Optional, Union

import httpx
import openai
import requests
from openai import OpenAI
from PIL import Image

_logger = logging.getLogger(__name__)

_OPENAI_BASE_URL = "https://api.openai.com/v1"


class LLMError(RuntimeError):
    """Transport failure or malformed response from the completions API."""


# ---------------------------------------------------------------------------
# Token usage dataclasses
# ---------------------------------------------------------------------------


@dataclass
class LLMUsage:
    """Token usage from a single LLM call."""

    input_tokens: int = 0
    output_tokens: int = 0
    model: str = ""


@dataclass
class LLMResponse:
    """LLM response bundled with token usage.

    Callers that only need the text can use ``resp.text``.
    Cost-aware callers can inspect ``resp.usage``.
    """

    text: str
    usage: LLMUsage = field(default_factory=LLMUsage)


@dataclass
class ToolCall:
    """A function call requested by the model in a streamed turn."""

    call_id: str
    name: str
    arguments: str = ""


@dataclass
class StreamEvent:
    """One decoded piece of a streamed chat completion.

    Exactly one of ``text``, ``tool_calls`` or ``usage`` is set.
    ``tool_calls`` is only emitted once, at the end of a turn whose
    finish reason is ``tool_calls``.
    """

    text: str | None = None
    tool_calls: list[ToolCall] | None = None
    usage: LLMUsage | None = None


class OpenAIClient:
    """Client for OpenAI Chat Completions.

    Single-shot and vision calls go over ``requests``; streamed turns use
    the ``openai`` SDK, which owns the SSE framing and UTF-8 decoding.
    Neither path retries.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4.1-mini",
        *,
        timeout: float | None = 300,
        base_url: str = _OPENAI_BASE_URL,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._timeout = timeout
        self._url = f"{base_url.rstrip('/')}/chat/completions"
        self._sdk = OpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout,
            max_retries=0,
            http_client=http_client,
        )

    @property
    def model(self) -> str:
        return self._model

    def _pil_to_base64(self, pil_img: Image.Image) -> str:
        """Convert a PIL image to a base64-encoded JPEG string."""
        buffered = io.BytesIO()
        if pil_img.mode in ("RGBA", "P"):
            pil_img = pil_img.convert("RGB")
        pil_img.save(buffered, format="JPEG")
        return base64.b64encode(buffered.getvalue()).decode("utf-8")

    # ------------------------------------------------------------------
    # Core generation
    # ------------------------------------------------------------------

    def generate_text(
        self,
        prompt: Union[str, List[Any]],
        *,
        system: Optional[str] = None,
        model: Optional[str] = None,
        temperature: float = 0.0,
    ) -> LLMResponse:
        """Call Chat Completions API, return ``LLMResponse(text, usage)``."""
        messages = self._build_messages(prompt, system)
        data: dict[str, Any] = {
            "model": model or self._model,
            "messages": messages,
            "temperature": temperature,
        }

        body = self._post(data)

        try:
            text = body["choices"][0]["message"]["content"] or ""
        except (KeyError, IndexError, TypeError) as exc:
            raise LLMError(f"Malformed completion response: {body!r}") from exc

        usage = LLMUsage(model=data["model"])
        raw_usage = body.get("usage")
        if raw_usage:
            usage.input_tokens = raw_usage.get("prompt_tokens", 0)
            usage.output_tokens = raw_usage.get("completion_tokens", 0)

        return LLMResponse(text=text, usage=usage)

    def call_with_images(
        self,
        prompt: str,
        images: list[Any],
        *,
        system: Optional[str] = None,
        model: Optional[str] = None,
    ) -> LLMResponse:
        """Send *prompt* to the LLM, attaching *images* when present."""
        if images:
            multimodal_prompt: list[Any] = [prompt, *images]
            return self.generate_text(multimodal_prompt, system=system, model=model)
        return self.generate_text(prompt, system=system, model=model)

    # ------------------------------------------------------------------
    # Streaming
    # ------------------------------------------------------------------

    def stream_chat(
        self,
        messages: list[dict[str, Any]],
        *,
        tools: Optional[list[dict[str, Any]]] = None,
        model: Optional[str] = None,
        temperature: float = 0.0,
    ) -> Iterator[StreamEvent]:
        """Stream a chat completion as ``StreamEvent`` objects.

        Text deltas are yielded in the order they arrive. Tool-call
        deltas are accumulated by index and yielded as a single event
        when the turn ends. A final usage event is yielded when the
        server reports token counts.

        Raises:
            LLMError: If the request fails or the connection drops while
                the stream is being read.
        """
        params: dict[str, Any] = {
            "model": model or self._model,
            "messages": messages,
            "temperature": temperature,
            "stream": True,
            "stream_options": {"include_usage": True},
        }
        if tools:
            params["tools"] = tools

        pending_calls: dict[int, ToolCall] = {}
        finish_reason: str | None = None

        try:
            for chunk in self._sdk.chat.completions.create(**params):
                if chunk.usage:
                    yield StreamEvent(usage=LLMUsage(
                        input_tokens=chunk.usage.prompt_tokens or 0,
                        output_tokens=chunk.usage.completion_tokens or 0,
                        model=params["model"],
                    ))

                for choice in chunk.choices or []:
                    delta = choice.delta
                    if delta is not None and delta.content:
                        yield StreamEvent(text=delta.content)
                    if delta is not None and delta.tool_calls:
                        for call_delta in delta.tool_calls:
                            _accumulate_tool_call(pending_calls, call_delta)
                    if choice.finish_reason:
                        finish_reason = choice.finish_reason
        except (openai.OpenAIError, httpx.HTTPError) as exc:
            raise LLMError(f"Streaming chat completion failed: {exc}") from exc

        if pending_calls:
            if finish_reason != "tool_calls":
                _logger.warning(
                    "Stream ended with finish_reason=%s but %d pending tool call(s)",
                    finish_reason, len(pending_calls),
                )
            yield StreamEvent(
                tool_calls=[pending_calls[i] for i in sorted(pending_calls)],
            )

    # ------------------------------------------------------------------
    # Transport (single attempt)
    # ------------------------------------------------------------------

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }

    def _post(self, data: dict[str, Any]) -> dict[str, Any]:
        """POST to the completions API and return the decoded body."""
        try:
            resp = requests.post(
                self._url, headers=self._headers(),
                json=data, timeout=self._timeout,
            )
            resp.raise_for_status()
            return resp.json()
        except requests.exceptions.RequestException as exc:
            raise LLMError(f"Chat completion request failed: {exc}") from exc
        except ValueError as exc:
            raise LLMError(f"Chat completion returned invalid JSON: {exc}") from exc

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _build_messages(
        self, prompt: Union[str, List[Any]], system: Optional[str],
    ) -> list[dict[str, Any]]:
        messages: list[dict[str, Any]] = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": self._build_content(prompt)})
        return messages

    def _build_content(
        self, prompt: Union[str, List[Any]],
    ) -> list[dict[str, Any]]:
        """Convert a prompt (str or list of parts) to API content array."""
        content: list[dict[str, Any]] = []
        if isinstance(prompt, list):
            for part in prompt:
                if isinstance(part, str):
                    content.append({"type": "text", "text": part})
                elif hasattr(part, "save"):  # PIL Image
                    b64 = self._pil_to_base64(part)
                    content.append({
                        "type": "image_url",
                        "image_url": {
                            "url": f"data:image/jpeg;base64,{b64}",
                        },
                    })
        else:
            content.append({"type": "text", "text": str(prompt)})
        return content


def _accumulate_tool_call(pending: dict[int, ToolCall], call_delta: Any) -> None:
    """Fold one streamed tool-call fragment into the call at its index."""
    call = pending.setdefault(call_delta.index, ToolCall(call_id="", name=""))
    if call_delta.id:
        call.call_id = call_delta.id
    function = call_delta.function
    if function is None:
        return
    if function.name:
        call.name = function.name
    if function.arguments:
        call.arguments += function.arguments
