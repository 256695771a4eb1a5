"""
Scratchpad construction: turning the run history into backend context.

Two renderings are provided:
- TextScratchpadBuilder: ReAct-style transcript appended to a text prompt
- MessageScratchpadBuilder: chat messages pairing each tool call with its result

Both are pure functions of the history. ``build_final`` is used only for the
one extra call of the "generate" early stop and pushes the backend to answer.
"""

import json
from typing import Any, Protocol, Sequence

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, ToolMessage

from agentcore.agent.prompts import FINAL_ANSWER_MARKER, FINAL_ANSWER_INSTRUCTION
from agentcore.agent.types import ActionRecord, Scratchpad


class ScratchpadBuilder(Protocol):
    """Builds backend context from the ordered action history."""

    def build_incremental(self, history: Sequence[ActionRecord]) -> Scratchpad: ...

    def build_final(self, history: Sequence[ActionRecord]) -> Scratchpad: ...


# ============================================================================
# Text (ReAct) Scratchpad
# ============================================================================


class TextScratchpadBuilder:
    """Renders history as ``log / Observation / Thought`` lines."""

    def __init__(
        self,
        observation_prefix: str = "Observation: ",
        llm_prefix: str = "Thought: ",
    ):
        self.observation_prefix = observation_prefix
        self.llm_prefix = llm_prefix

    def build_incremental(self, history: Sequence[ActionRecord]) -> Scratchpad[str]:
        thoughts = ""
        for action in history:
            thoughts += action.log
            if action.observation is not None:
                thoughts += (
                    f"\n{self.observation_prefix}{action.observation}\n{self.llm_prefix}"
                )
        return Scratchpad(thoughts)

    def build_final(self, history: Sequence[ActionRecord]) -> Scratchpad[str]:
        thoughts = self.build_incremental(history).content
        return Scratchpad(thoughts + FINAL_ANSWER_MARKER)


# ============================================================================
# Chat Message Scratchpad
# ============================================================================


def tool_call_args(tool_input: str) -> dict[str, Any]:
    """Decode an opaque tool input into tool-call args.

    JSON objects are used as-is; anything else is wrapped as ``{"input": ...}``.
    """
    try:
        args = json.loads(tool_input)
    except (json.JSONDecodeError, TypeError):
        return {"input": tool_input}
    if isinstance(args, dict):
        return args
    return {"input": tool_input}


class MessageScratchpadBuilder:
    """Renders history as AIMessage tool calls followed by ToolMessage results.

    Pending actions are skipped: a tool call without its result is not a
    valid chat transcript.
    """

    def build_incremental(
        self, history: Sequence[ActionRecord]
    ) -> Scratchpad[tuple[BaseMessage, ...]]:
        messages: list[BaseMessage] = []
        for index, action in enumerate(history):
            if action.observation is None:
                continue
            call_id = action.call_id or f"call_{index}"
            messages.append(
                AIMessage(
                    content=action.log,
                    tool_calls=[
                        {
                            "name": action.tool,
                            "args": tool_call_args(action.tool_input),
                            "id": call_id,
                        }
                    ],
                )
            )
            messages.append(
                ToolMessage(content=action.observation, tool_call_id=call_id)
            )
        return Scratchpad(tuple(messages))

    def build_final(
        self, history: Sequence[ActionRecord]
    ) -> Scratchpad[tuple[BaseMessage, ...]]:
        messages = self.build_incremental(history).content
        return Scratchpad(messages + (HumanMessage(content=FINAL_ANSWER_INSTRUCTION),))
