"""
Interpreters turning one backend response into a NextStep.

Parsing is total: every response maps to Actions, Finish or Thought. Output
that cannot be understood becomes a Thought so the run keeps going.
"""

import json
import re
from typing import Any, Generic, Optional

from langchain_core.messages import AIMessage
from pydantic import ValidationError

from agentcore.agent.types import (
    ActionRecord,
    Actions,
    Finish,
    FinishResult,
    NextStep,
    Output,
    Thought,
)
from agentcore.utils.logger import get_logger

log = get_logger(__name__)

_CODE_FENCE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


def extract_text_content(response: AIMessage) -> str:
    """Extract text content from AIMessage."""
    if isinstance(response.content, str):
        return response.content
    if isinstance(response.content, list):
        return "".join(
            block.get("text", "") if isinstance(block, dict) else str(block)
            for block in response.content
        )
    return ""


def parse_structured(
    schema: type[Output], payload: Any
) -> Optional[Output]:
    """Validate a dict or JSON text against ``schema``; None when it doesn't fit."""
    try:
        if isinstance(payload, str):
            text = payload.strip()
            fenced = _CODE_FENCE.match(text)
            if fenced:
                text = fenced.group(1)
            return schema.model_validate_json(text)
        return schema.model_validate(payload)
    except ValidationError as e:
        log.debug(f"Structured output rejected by {schema.__name__}: {e}")
        return None


# ============================================================================
# ReAct Text Parser
# ============================================================================


_STOP = r"(?=\n\s*(?:Action\s*\d*\s*:|Observation\s*:|Thought\s*:|Final Answer\s*:)|\Z)"

ACTION_PATTERN = re.compile(
    r"Action\s*\d*\s*:[ \t]*(?P<tool>[^\n]*?)[ \t]*\n+\s*"
    r"Action\s*\d*\s*Input\s*\d*\s*:[ \t]*(?P<input>.*?)" + _STOP,
    re.DOTALL,
)
FINAL_ANSWER_PATTERN = re.compile(r"Final Answer\s*:(?P<answer>.*)", re.DOTALL)


class ReActOutputParser(Generic[Output]):
    """Parses ``Action:/Action Input:`` and ``Final Answer:`` text.

    When both appear, the actions win: their observations are not known yet,
    so an answer written after them is a guess.
    """

    def __init__(self, output_schema: Optional[type[Output]] = None):
        self.output_schema = output_schema

    def parse(self, text: str) -> NextStep:
        actions = self._parse_actions(text)
        if actions:
            return Actions(tuple(actions))

        final = FINAL_ANSWER_PATTERN.search(text)
        if final:
            answer = final.group("answer").strip()
            if self.output_schema is None:
                return Finish(FinishResult.unstructured(answer, log=text))
            value = parse_structured(self.output_schema, answer)
            if value is not None:
                return Finish(FinishResult.structured(value, log=text))

        return Thought(text)

    def _parse_actions(self, text: str) -> list[ActionRecord]:
        actions = []
        start = 0
        for match in ACTION_PATTERN.finditer(text):
            tool = match.group("tool").strip()
            if not tool:
                continue
            tool_input = match.group("input").strip().strip('"')
            actions.append(
                ActionRecord(
                    tool=tool,
                    tool_input=tool_input,
                    log=text[start : match.end()],
                )
            )
            start = match.end()
        return actions


# ============================================================================
# Tool Calling Parser
# ============================================================================


class ToolCallingOutputParser(Generic[Output]):
    """Parses native tool calls from a chat model response.

    With an ``output_schema`` the answer is expected as a call to the tool
    named after the schema; plain JSON text matching the schema is accepted
    too. Without a schema, text with no tool calls is the answer.
    """

    def __init__(self, output_schema: Optional[type[Output]] = None):
        self.output_schema = output_schema

    @property
    def answer_tool_name(self) -> Optional[str]:
        return self.output_schema.__name__ if self.output_schema else None

    def parse(self, response: AIMessage) -> NextStep:
        text = extract_text_content(response)
        tool_calls = response.tool_calls or []

        answer_calls = [tc for tc in tool_calls if tc["name"] == self.answer_tool_name]
        action_calls = [tc for tc in tool_calls if tc["name"] != self.answer_tool_name]

        if action_calls:
            return Actions(
                tuple(
                    ActionRecord(
                        tool=tc["name"],
                        tool_input=json.dumps(tc.get("args", {}), ensure_ascii=False),
                        log=text,
                        call_id=tc.get("id"),
                    )
                    for tc in action_calls
                )
            )

        if answer_calls:
            args = answer_calls[0].get("args", {})
            value = parse_structured(self.output_schema, args)
            if value is not None:
                return Finish(FinishResult.structured(value, log=text))
            return Thought(text or json.dumps(args, ensure_ascii=False))

        if getattr(response, "invalid_tool_calls", None):
            log.warning(
                f"Backend produced {len(response.invalid_tool_calls)} malformed tool call(s)"
            )
            return Thought(text or str(response.invalid_tool_calls[0].get("args") or ""))

        if not text.strip():
            return Thought(text)

        if self.output_schema is None:
            return Finish(FinishResult.unstructured(text, log=text))

        value = parse_structured(self.output_schema, text)
        if value is not None:
            return Finish(FinishResult.structured(value, log=text))
        return Thought(text)


__all__ = [
    "extract_text_content",
    "parse_structured",
    "ReActOutputParser",
    "ToolCallingOutputParser",
]
