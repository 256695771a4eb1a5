from typing import Optional, Sequence

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage
from langchain_core.tools import BaseTool

from agentcore.agent.agent import Agent
from agentcore.agent.errors import ToolValidationError
from agentcore.agent.parsers import ToolCallingOutputParser
from agentcore.agent.prompts import build_tool_calling_messages, get_current_time
from agentcore.agent.scratchpad import MessageScratchpadBuilder
from agentcore.agent.types import AgentInput, NextStep, Output
from agentcore.model.chain import ChatModelChain


class ToolCallingAgent(Agent[str, Output]):
    """Agent for chat models with native tool calling.

    When ``output_schema`` is given the schema is bound as an extra tool and
    the final answer arrives as a call to it.
    """

    def __init__(
        self,
        llm: BaseChatModel,
        tools: Sequence[BaseTool],
        output_schema: Optional[type[Output]] = None,
        timeout: Optional[float] = None,
    ):
        self.tools = list(tools)
        self.output_schema = output_schema
        self.output_parser = ToolCallingOutputParser(output_schema)
        self.scratchpad_builder = MessageScratchpadBuilder()

        bound = [*self.tools, output_schema] if output_schema else self.tools
        self.chain = ChatModelChain(
            llm=llm,
            prompt=lambda agent_input: build_tool_calling_messages(
                agent_input, self.output_schema
            ),
            tools=bound,
            timeout=timeout,
        )

    def validate_tools(self, tools: Sequence[BaseTool]) -> None:
        super().validate_tools(tools)
        answer_tool = self.output_parser.answer_tool_name
        if answer_tool and any(tool.name == answer_tool for tool in tools):
            raise ToolValidationError(
                f"Tool name '{answer_tool}' is reserved for the final answer"
            )

    def extra_plan(self, agent_input: AgentInput) -> None:
        agent_input.metadata.setdefault("current_date", get_current_time())

    def parse_output(self, output: AIMessage) -> NextStep:
        return self.output_parser.parse(output)
