"""
The agent capability contract.

An Agent knows how to build a scratchpad for its backend, how to read the
backend's reply and which tools it can work with. From those pieces this
module derives the two operations the driver loop needs:

- plan(): one decision step (scratchpad → backend → NextStep)
- return_stopped_response(): resolve a run whose budget ran out
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Generic, Optional, Sequence

from langchain_core.messages import AIMessage
from langchain_core.tools import BaseTool

from agentcore.agent.errors import ToolValidationError
from agentcore.agent.parsers import extract_text_content
from agentcore.agent.prompts import FORCE_STOP_MESSAGE
from agentcore.agent.scratchpad import ScratchpadBuilder
from agentcore.agent.types import (
    ActionRecord,
    Actions,
    AgentInput,
    EarlyStopStrategy,
    Finish,
    FinishResult,
    InputT,
    NextStep,
    Output,
    Scratchpad,
    Thought,
)
from agentcore.model.chain import ChatModelChain
from agentcore.utils.logger import get_logger

log = get_logger(__name__)


class Agent(ABC, Generic[InputT, Output]):
    chain: ChatModelChain
    scratchpad_builder: ScratchpadBuilder

    # ========================================================================
    # Required behaviours
    # ========================================================================

    def validate_tools(self, tools: Sequence[BaseTool]) -> None:
        """Raise ToolValidationError if the agent cannot drive these tools."""
        names = [tool.name for tool in tools]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ToolValidationError(f"Duplicate tool names: {', '.join(duplicates)}")

    def construct_scratchpad(self, history: Sequence[ActionRecord]) -> Scratchpad:
        return self.scratchpad_builder.build_incremental(history)

    def construct_final_scratchpad(
        self, history: Sequence[ActionRecord]
    ) -> Scratchpad:
        return self.scratchpad_builder.build_final(history)

    def extra_plan(self, agent_input: AgentInput) -> None:
        """Hook to enrich the request right before it is dispatched."""

    @abstractmethod
    def parse_output(self, output: AIMessage) -> NextStep:
        """Interpret a backend reply. Must not raise on unexpected content."""

    # ========================================================================
    # Decision step
    # ========================================================================

    def get_full_inputs(
        self, input: InputT, history: Sequence[ActionRecord]
    ) -> AgentInput:
        return AgentInput(input=input, scratchpad=self.construct_scratchpad(history))

    async def plan(
        self,
        input: InputT,
        history: Sequence[ActionRecord],
        *,
        timeout: Optional[float] = None,
        cancellation_token: Optional[asyncio.Event] = None,
    ) -> NextStep:
        """Decide what happens next given the task and the actions so far.

        Args:
            input: The task input.
            history: Actions taken so far, with their observations.
            timeout: Limit for the backend call, in seconds.
            cancellation_token: Set it to abandon the backend call.

        Returns:
            NextStep: Actions to execute, a Finish, or a Thought.

        Raises:
            BackendError: The backend could not be reached.
            DecisionCancelledError: Cancelled or timed out while waiting.
        """
        agent_input = self.get_full_inputs(input, tuple(history))
        self.extra_plan(agent_input)
        output = await self.chain.call(
            agent_input, timeout=timeout, cancellation_token=cancellation_token
        )
        step = self.parse_output(output)
        log.debug(f"Planned {type(step).__name__} after {len(history)} action(s)")
        return step

    # ========================================================================
    # Early stop
    # ========================================================================

    async def return_stopped_response(
        self,
        input: InputT,
        strategy: EarlyStopStrategy,
        history: Sequence[ActionRecord],
        *,
        timeout: Optional[float] = None,
        cancellation_token: Optional[asyncio.Event] = None,
    ) -> FinishResult[Output]:
        """Resolve a run that exhausted its budget before finishing.

        FORCE answers with a fixed notice and makes no backend call. GENERATE
        makes exactly one more call with the final scratchpad; actions it
        proposes can no longer run, so its raw text becomes the answer.
        """
        if strategy == EarlyStopStrategy.FORCE:
            log.info("Early stop (force)")
            return FinishResult.unstructured(FORCE_STOP_MESSAGE, log="")

        log.info(f"Early stop (generate) after {len(history)} action(s)")
        agent_input = AgentInput(
            input=input, scratchpad=self.construct_final_scratchpad(tuple(history))
        )
        output = await self.chain.call(
            agent_input, timeout=timeout, cancellation_token=cancellation_token
        )
        step = self.parse_output(output)

        if isinstance(step, Finish):
            return step.result
        if isinstance(step, Actions):
            content = extract_text_content(output)
            return FinishResult.unstructured(content, log=content)
        if isinstance(step, Thought):
            return FinishResult.unstructured(step.text, log=step.text)
        raise TypeError(f"Unknown next step: {step!r}")

