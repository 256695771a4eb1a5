from langchain_core.tools import tool
from pydantic import BaseModel, Field

from agentcore.agent import (
    AgentConfig,
    AgentExecutor,
    EarlyStopStrategy,
    ReActAgent,
    Structured,
    ToolCallingAgent,
)
from agentcore.agent.callbacks import ActionEndEvent, ActionStartEvent
from agentcore.model import get_chat_llm


@tool
def word_count(text: str) -> str:
    """Count the words in a piece of text."""
    return str(len(text.split()))


@tool
def add(a: int, b: int) -> str:
    """Add two integers."""
    return str(a + b)


class CountReport(BaseModel):
    words: int = Field(..., description="Number of words counted.")
    summary: str = Field(..., description="One sentence explaining the result.")


def print_event(event) -> None:
    if isinstance(event, ActionStartEvent):
        print(f"  -> {event.action.tool}({event.action.tool_input})")
    elif isinstance(event, ActionEndEvent):
        print(f"  <- {event.action.observation}")


async def main():
    config = AgentConfig.from_env()
    llm = get_chat_llm(model=config.model, timeout=config.request_timeout)
    tools = [word_count, add]

    print("agentcore 基础示例\n")

    # Example 1: Native tool calling with a structured answer.
    print("示例 1: Tool calling agent with a structured answer\n")
    agent = ToolCallingAgent(llm, tools, output_schema=CountReport)
    executor = AgentExecutor(agent, tools, config, callbacks=[print_event])
    result = await executor.run(
        "How many words are in 'the quick brown fox jumps over the lazy dog'?"
    )
    if isinstance(result.return_value, Structured):
        print(f"Report: {result.return_value.value}")
    else:
        print(f"Response: {result.text}")

    # Example 2: ReAct text agent that has to stop early.
    print("\n示例 2: ReAct agent limited to two steps\n")
    config = config.model_copy(
        update={
            "max_iterations": 2,
            "early_stopping_method": EarlyStopStrategy.GENERATE,
        }
    )
    agent = ReActAgent(llm, tools)
    executor = AgentExecutor(agent, tools, config, callbacks=[print_event])
    result = await executor.run("Add 1 and 2, then add 3 to that, then add 4.")
    print(f"Response: {result.text}")


if __name__ == "__main__":
    import asyncio

    asyncio.run(main())
