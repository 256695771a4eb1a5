"""Shared fixtures: a scripted backend chain and a few simple tools."""

import asyncio
from typing import Any, Optional
from unittest.mock import MagicMock

import pytest
from langchain_core.messages import AIMessage
from langchain_core.tools import tool

from agentcore.agent.react import ReActAgent
from agentcore.agent.tool_calling import ToolCallingAgent
from agentcore.agent.types import AgentInput


class ScriptedChain:
    """Stands in for ChatModelChain and replays canned backend replies.

    Items that are exceptions are raised instead of returned.
    """

    def __init__(self, responses: list[Any]):
        self.responses = list(responses)
        self.inputs: list[AgentInput] = []
        self.timeouts: list[Optional[float]] = []

    @property
    def call_count(self) -> int:
        return len(self.inputs)

    async def call(
        self,
        agent_input: AgentInput,
        *,
        timeout: Optional[float] = None,
        cancellation_token: Optional[asyncio.Event] = None,
    ) -> AIMessage:
        self.inputs.append(agent_input)
        self.timeouts.append(timeout)
        if not self.responses:
            raise AssertionError("ScriptedChain ran out of responses")
        response = self.responses.pop(0)
        if isinstance(response, BaseException):
            raise response
        if isinstance(response, str):
            return AIMessage(content=response)
        return response


@tool
def search(query: str) -> str:
    """Search the web for a query."""
    return "no results"


@tool
def calculator(expression: str) -> str:
    """Evaluate a simple sum such as '2 + 3'."""
    left, right = expression.split("+")
    return str(int(left) + int(right))


@tool
def broken(query: str) -> str:
    """A tool that always fails."""
    raise RuntimeError("service unavailable")


@pytest.fixture
def tools():
    return [search, calculator, broken]


@pytest.fixture
def react_agent_factory(tools):
    """Build a ReActAgent whose backend replays ``responses``."""

    def factory(responses: list[Any], output_schema=None) -> ReActAgent:
        agent = ReActAgent(llm=MagicMock(), tools=tools, output_schema=output_schema)
        agent.chain = ScriptedChain(responses)
        return agent

    return factory


@pytest.fixture
def tool_calling_agent_factory(tools):
    """Build a ToolCallingAgent whose backend replays ``responses``."""

    def factory(responses: list[Any], output_schema=None) -> ToolCallingAgent:
        agent = ToolCallingAgent(
            llm=MagicMock(), tools=tools, output_schema=output_schema
        )
        agent.chain = ScriptedChain(responses)
        return agent

    return factory
