"""
Agent module - the decision loop of a tool-using reasoning agent.

Core components:
- Agent: Capability contract (scratchpad, backend call, output parsing, early stop)
- ReActAgent / ToolCallingAgent: Concrete agents for text and native tool calling
- AgentExecutor: Driver loop enforcing the iteration and time budget
- CallbackBus: Run-scoped observer of action and finish events
- Types: ActionRecord, FinishResult, NextStep variants, AgentConfig

Usage:
    from agentcore.agent import AgentExecutor, AgentConfig, ToolCallingAgent
    from agentcore.model import get_chat_llm

    agent = ToolCallingAgent(get_chat_llm(), tools)
    result = await AgentExecutor(agent, tools, AgentConfig()).run("Your task")
    print(result.text)
"""

from agentcore.agent.agent import Agent
from agentcore.agent.callbacks import (
    ActionEndEvent,
    ActionStartEvent,
    AgentFinishEvent,
    CallbackBus,
    CallbackEvent,
    CallbackHandler,
)
from agentcore.agent.errors import (
    AgentError,
    BackendError,
    DecisionCancelledError,
    ToolValidationError,
)
from agentcore.agent.executor import AgentExecutor
from agentcore.agent.parsers import ReActOutputParser, ToolCallingOutputParser
from agentcore.agent.react import ReActAgent
from agentcore.agent.scratchpad import (
    MessageScratchpadBuilder,
    ScratchpadBuilder,
    TextScratchpadBuilder,
)
from agentcore.agent.tool_calling import ToolCallingAgent
from agentcore.agent.types import (
    ActionRecord,
    Actions,
    AgentConfig,
    AgentInput,
    EarlyStopStrategy,
    Finish,
    FinishResult,
    NextStep,
    ReturnValue,
    Scratchpad,
    Structured,
    Thought,
    Unstructured,
)

__all__ = [
    "Agent",
    "AgentExecutor",
    "ReActAgent",
    "ToolCallingAgent",
    "AgentConfig",
    "AgentInput",
    "ActionRecord",
    "Actions",
    "Finish",
    "Thought",
    "NextStep",
    "FinishResult",
    "ReturnValue",
    "Structured",
    "Unstructured",
    "Scratchpad",
    "ScratchpadBuilder",
    "TextScratchpadBuilder",
    "MessageScratchpadBuilder",
    "ReActOutputParser",
    "ToolCallingOutputParser",
    "EarlyStopStrategy",
    "CallbackBus",
    "CallbackEvent",
    "CallbackHandler",
    "ActionStartEvent",
    "ActionEndEvent",
    "AgentFinishEvent",
    "AgentError",
    "BackendError",
    "DecisionCancelledError",
    "ToolValidationError",
]
