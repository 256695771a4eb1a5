from typing import Optional, Sequence

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage
from langchain_core.tools import BaseTool

from agentcore.agent.agent import Agent
from agentcore.agent.errors import ToolValidationError
from agentcore.agent.parsers import ReActOutputParser, extract_text_content
from agentcore.agent.prompts import build_react_messages, get_current_time
from agentcore.agent.scratchpad import TextScratchpadBuilder
from agentcore.agent.types import AgentInput, NextStep, Output
from agentcore.model.chain import ChatModelChain


class ReActAgent(Agent[str, Output]):
    """Text-only agent following the Thought / Action / Observation format.

    Works with any chat model, including ones without native tool calling.
    Several ``Action`` blocks in one reply become one batch of actions.
    """

    observation_prefix = "Observation: "
    llm_prefix = "Thought: "

    def __init__(
        self,
        llm: BaseChatModel,
        tools: Sequence[BaseTool],
        output_schema: Optional[type[Output]] = None,
        timeout: Optional[float] = None,
    ):
        self.tools = list(tools)
        self.output_parser = ReActOutputParser(output_schema)
        self.scratchpad_builder = TextScratchpadBuilder(
            observation_prefix=self.observation_prefix,
            llm_prefix=self.llm_prefix,
        )
        self.chain = ChatModelChain(
            llm=llm,
            prompt=lambda agent_input: build_react_messages(agent_input, self.tools),
            timeout=timeout,
        )

    def validate_tools(self, tools: Sequence[BaseTool]) -> None:
        super().validate_tools(tools)
        undescribed = [tool.name for tool in tools if not tool.description]
        if undescribed:
            raise ToolValidationError(
                f"ReAct tools need a description: {', '.join(undescribed)}"
            )

    def extra_plan(self, agent_input: AgentInput) -> None:
        agent_input.metadata.setdefault("current_date", get_current_time())

    def parse_output(self, output: AIMessage) -> NextStep:
        return self.output_parser.parse(extract_text_content(output))
