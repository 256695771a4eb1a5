from datetime import datetime
from typing import Any, Sequence

from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage
from langchain_core.tools import BaseTool
from pydantic import BaseModel

from agentcore.agent.types import AgentInput

# ======================================================================
# Helper Functions
# ======================================================================


def get_current_time() -> str:
    """Returns the current date formatted for prompts.

    Returns:
        str: such as 'Thursday, January 22, 2026'
    """
    return datetime.now().strftime("%A, %B %d, %Y")


def format_task_input(value: Any) -> str:
    """Render the task input for a prompt."""
    if isinstance(value, BaseModel):
        return value.model_dump_json(indent=2)
    return str(value)


def format_tool_descriptions(tools: Sequence[BaseTool]) -> str:
    return "\n".join(f"{tool.name}: {tool.description}" for tool in tools)


# ======================================================================
# Early Stop Texts
# ======================================================================

FORCE_STOP_MESSAGE = "Agent stopped due to iteration limit or time limit."

FINAL_ANSWER_MARKER = (
    "\n\nI now need to return a final answer based on the previous steps:"
)

FINAL_ANSWER_INSTRUCTION = (
    "You have run out of steps. Do not call any more tools. "
    "Using only the information gathered above, give your final answer now."
)

# ======================================================================
# ReAct Prompts
# ======================================================================

REACT_SYSTEM_PROMPT = """You are a helpful assistant that solves tasks step by step.

Current date: {current_date}

You have access to the following tools:

{tool_descriptions}

Use the following format:

Question: the input question you must answer
Thought: you should always think about what to do
Action: the action to take, should be one of [{tool_names}]
Action Input: the input to the action
Observation: the result of the action
... (this Thought/Action/Action Input/Observation can repeat N times)
Thought: I now know the final answer
Final Answer: the final answer to the original input question

You may list several Action / Action Input pairs in one reply when they do not
depend on each other. Never write an Observation yourself."""

REACT_USER_PROMPT = """Question: {input}
Thought: {scratchpad}"""


def build_react_messages(
    agent_input: AgentInput, tools: Sequence[BaseTool]
) -> list[BaseMessage]:
    system_prompt = REACT_SYSTEM_PROMPT.format(
        current_date=agent_input.metadata.get("current_date") or get_current_time(),
        tool_descriptions=format_tool_descriptions(tools),
        tool_names=", ".join(tool.name for tool in tools),
    )
    user_prompt = REACT_USER_PROMPT.format(
        input=format_task_input(agent_input.input),
        scratchpad=agent_input.scratchpad.content,
    )
    return [SystemMessage(content=system_prompt), HumanMessage(content=user_prompt)]


# ======================================================================
# Tool Calling Prompts
# ======================================================================

TOOL_CALLING_SYSTEM_PROMPT = """You are a helpful assistant equipped with tools.

Current date: {current_date}

Call tools when you need information you do not have. Several independent tool
calls may be issued at once. When you have enough information, answer directly.{answer_instruction}"""

STRUCTURED_ANSWER_INSTRUCTION = """
Deliver your final answer by calling the `{schema_name}` tool exactly once."""


def build_tool_calling_messages(
    agent_input: AgentInput,
    output_schema: type[BaseModel] | None = None,
) -> list[BaseMessage]:
    answer_instruction = ""
    if output_schema is not None:
        answer_instruction = STRUCTURED_ANSWER_INSTRUCTION.format(
            schema_name=output_schema.__name__
        )
    system_prompt = TOOL_CALLING_SYSTEM_PROMPT.format(
        current_date=agent_input.metadata.get("current_date") or get_current_time(),
        answer_instruction=answer_instruction,
    )
    return [
        SystemMessage(content=system_prompt),
        HumanMessage(content=format_task_input(agent_input.input)),
        *agent_input.scratchpad.content,
    ]
