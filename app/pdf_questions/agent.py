"""Agents as plain functions over an explicit tool registry.

An agent is a persona (system instructions) plus the set of tools it may
call. Callers hand both to ``run_agent`` directly; there is no global
registry to look agents up by name.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any, Optional

from app.llm_clients import LLMError, LLMUsage, OpenAIClient, ToolCall

logger = logging.getLogger(__name__)

DEFAULT_MAX_TOOL_ROUNDS = 3


@dataclass(frozen=True)
class ToolSpec:
    """A function the model may call.

    Attributes:
        name: Function name advertised to the model.
        description: What the tool does (shown to the model).
        parameters: JSON Schema of the keyword arguments.
        handler: Callable invoked with the decoded arguments. Its return
            value is JSON-encoded and sent back to the model.
    """

    name: str
    description: str
    parameters: dict[str, Any]
    handler: Callable[..., Any]

    def to_openai(self) -> dict[str, Any]:
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }


ToolRegistry = Mapping[str, ToolSpec]


def tool_registry(*tools: ToolSpec) -> dict[str, ToolSpec]:
    """Build a name → ToolSpec mapping."""
    return {tool.name: tool for tool in tools}


def run_agent(
    instructions: str,
    tools: ToolRegistry,
    input_text: str,
    *,
    client: OpenAIClient,
    model: Optional[str] = None,
    max_tool_rounds: int = DEFAULT_MAX_TOOL_ROUNDS,
    on_usage: Optional[Callable[[LLMUsage], None]] = None,
) -> Iterator[str]:
    """Stream the agent's reply to *input_text*.

    Text chunks are yielded in arrival order. When the model requests
    tool calls, each is dispatched to *tools*, the results are appended
    to the conversation and streaming resumes, for at most
    *max_tool_rounds* rounds.

    Raises:
        LLMError: On transport failure or when the model keeps calling
            tools past *max_tool_rounds*.
    """
    messages: list[dict[str, Any]] = [
        {"role": "system", "content": instructions},
        {"role": "user", "content": input_text},
    ]
    tool_defs = [tool.to_openai() for tool in tools.values()] or None

    for round_index in range(max_tool_rounds + 1):
        turn_text: list[str] = []
        calls: list[ToolCall] = []

        for event in client.stream_chat(messages, tools=tool_defs, model=model):
            if event.text:
                turn_text.append(event.text)
                yield event.text
            elif event.tool_calls:
                calls = event.tool_calls
            elif event.usage and on_usage is not None:
                on_usage(event.usage)

        if not calls:
            return
        if round_index == max_tool_rounds:
            raise LLMError(
                f"Agent exceeded {max_tool_rounds} tool round(s) without a final answer",
            )

        messages.append({
            "role": "assistant",
            "content": "".join(turn_text) or None,
            "tool_calls": [
                {
                    "id": call.call_id,
                    "type": "function",
                    "function": {"name": call.name, "arguments": call.arguments},
                }
                for call in calls
            ],
        })
        for call in calls:
            messages.append({
                "role": "tool",
                "tool_call_id": call.call_id,
                "content": dispatch_tool_call(tools, call),
            })


def dispatch_tool_call(tools: ToolRegistry, call: ToolCall) -> str:
    """Run one tool call and return its JSON-encoded result.

    Unknown tools, undecodable arguments and handler failures are
    returned to the model as ``{"error": ...}`` payloads.
    """
    tool = tools.get(call.name)
    if tool is None:
        logger.warning("Model requested unknown tool: %s", call.name)
        return json.dumps({"error": f"Unknown tool: {call.name}"})

    try:
        arguments = json.loads(call.arguments) if call.arguments else {}
    except json.JSONDecodeError as exc:
        return json.dumps({"error": f"Invalid arguments for {call.name}: {exc}"})
    if not isinstance(arguments, dict):
        return json.dumps({"error": f"Arguments for {call.name} must be an object"})

    logger.info("Calling tool %s", call.name)
    try:
        result = tool.handler(**arguments)
    except Exception as exc:
        logger.warning("Tool %s failed: %s", call.name, exc)
        return json.dumps({"error": f"{type(exc).__name__}: {exc}"})
    return json.dumps(result, default=str)


@dataclass(frozen=True)
class Agent:
    """A named persona with its instructions and tool set."""

    name: str
    instructions: str
    tools: ToolRegistry = field(default_factory=dict)
    model: Optional[str] = None

    def stream(
        self,
        input_text: str,
        *,
        client: OpenAIClient,
        max_tool_rounds: int = DEFAULT_MAX_TOOL_ROUNDS,
        on_usage: Optional[Callable[[LLMUsage], None]] = None,
    ) -> Iterator[str]:
        return run_agent(
            self.instructions,
            self.tools,
            input_text,
            client=client,
            model=self.model,
            max_tool_rounds=max_tool_rounds,
            on_usage=on_usage,
        )

    def run(self, input_text: str, *, client: OpenAIClient, **kwargs: Any) -> str:
        """Consume the stream and return the full reply."""
        return "".join(self.stream(input_text, client=client, **kwargs))
