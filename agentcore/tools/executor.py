"""
Tool boundary: run one proposed action and turn the outcome into an observation.

Failures never escape as exceptions. An unknown tool or a tool that raises
produces an observation describing the problem, so the next decision step can
reason about it. Cancellation always propagates.
"""

import asyncio
import json
import time
from typing import Any, Mapping

from langchain_core.tools import BaseTool

from agentcore.agent.types import ActionRecord
from agentcore.utils.logger import get_logger

log = get_logger(__name__)


def decode_tool_input(tool_input: str) -> Any:
    """JSON objects become keyword args, anything else is passed as raw text."""
    try:
        parsed = json.loads(tool_input)
    except (json.JSONDecodeError, TypeError):
        return tool_input
    return parsed if isinstance(parsed, dict) else tool_input


def format_observation(result: Any) -> str:
    if isinstance(result, str):
        return result
    try:
        return json.dumps(result, ensure_ascii=False)
    except (TypeError, ValueError):
        return str(result)


async def execute_tool(
    tool_map: Mapping[str, BaseTool],
    action: ActionRecord,
) -> str:
    """Execute one action and return its observation string.

    Args:
        tool_map (Mapping[str, BaseTool]): Available tools by name.
        action (ActionRecord): The pending action.

    Returns:
        str: The tool result, or an ``Error: ...`` description.
    """
    tool = tool_map.get(action.tool)
    if tool is None:
        log.warning(f"Backend asked for unknown tool '{action.tool}'")
        return (
            f"Error: {action.tool} is not a valid tool, "
            f"try one of [{', '.join(tool_map)}]."
        )

    log.info(f"Executing tool: {action.tool}")
    start_time = time.time()
    try:
        result = await tool.ainvoke(decode_tool_input(action.tool_input))
    except asyncio.CancelledError:
        raise
    except Exception as e:
        log.error(f"Tool {action.tool} failed: {e}")
        return f"Error: {e}"

    observation = format_observation(result)
    duration = int((time.time() - start_time) * 1000)
    log.info(
        f"Tool {action.tool} completed in {duration}ms (result_len={len(observation)})"
    )
    return observation
