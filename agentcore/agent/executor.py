"""
The driver loop.

AgentExecutor owns the run history and the budget. Each iteration asks the
agent for the next step, runs any proposed tools, and appends the observed
actions. When the budget runs out before a Finish, the agent's early-stop
resolver produces the result.
"""

import asyncio
import time
from typing import Generic, Iterable, Optional, Sequence

from langchain_core.tools import BaseTool

from agentcore.agent.agent import Agent
from agentcore.agent.callbacks import CallbackBus, CallbackHandler
from agentcore.agent.errors import DecisionCancelledError, ToolValidationError
from agentcore.agent.types import (
    ActionRecord,
    Actions,
    AgentConfig,
    EarlyStopStrategy,
    Finish,
    FinishResult,
    InputT,
    Output,
    Thought,
)
from agentcore.tools.executor import execute_tool
from agentcore.utils.logger import get_logger

log = get_logger(__name__)


class AgentExecutor(Generic[InputT, Output]):
    """
    Runs an agent against its tools until it finishes or the budget runs out.

    Usage:
        executor = AgentExecutor(agent, tools, AgentConfig(max_iterations=5))
        result = await executor.run("How many moons does Mars have?")
        print(result.text)
    """

    def __init__(
        self,
        agent: Agent[InputT, Output],
        tools: Sequence[BaseTool],
        config: Optional[AgentConfig] = None,
        callbacks: Optional[Iterable[CallbackHandler]] = None,
    ):
        self.agent = agent
        self.tools = list(tools)
        self.agent.validate_tools(self.tools)
        self.tool_map = {tool.name: tool for tool in self.tools}
        self._check_agent_tools()
        self.config = config or AgentConfig()
        self.callbacks = list(callbacks or [])

        log.info(
            f"AgentExecutor initialized with {len(self.tools)} tool(s), "
            f"max_iterations={self.config.max_iterations}, "
            f"max_execution_time={self.config.max_execution_time}, "
            f"early_stopping_method={self.config.early_stopping_method.value}"
        )

    async def run(
        self,
        input: InputT,
        cancellation_token: Optional[asyncio.Event] = None,
        callbacks: Optional[Iterable[CallbackHandler]] = None,
    ) -> FinishResult[Output]:
        """
        Run the agent on one task.

        Args:
            input: The task input.
            cancellation_token: Set it to stop the run; the result is then the
                forced early-stop answer.
            callbacks: Extra handlers for this run only.

        Returns:
            FinishResult: The agent's answer, possibly an early-stop one.

        Raises:
            BackendError: The backend failed; the run is abandoned.
        """
        bus = CallbackBus([*self.callbacks, *(callbacks or [])])
        history: list[ActionRecord] = []
        start_time = time.monotonic()
        iterations = 0
        result: Optional[FinishResult[Output]] = None

        log.info(f"Starting agent run: input='{str(input)[:50]}'")

        while self._should_continue(iterations, start_time):
            iterations += 1
            log.debug(f"Iteration {iterations}/{self.config.max_iterations}")

            try:
                step = await self.agent.plan(
                    input,
                    tuple(history),
                    timeout=self._call_timeout(start_time),
                    cancellation_token=cancellation_token,
                )
            except DecisionCancelledError as e:
                log.warning(f"Decision step stopped ({e.reason}), forcing a result")
                result = await self.agent.return_stopped_response(
                    input, EarlyStopStrategy.FORCE, tuple(history)
                )
                break

            if isinstance(step, Finish):
                result = step.result
                break
            if isinstance(step, Thought):
                log.debug(f"Thought without action: {step.text[:100]}")
                continue
            if isinstance(step, Actions):
                history.extend(await self._execute_actions(step.actions, bus))

        if result is None:
            log.warning(
                f"Budget exhausted after {iterations} iteration(s), "
                f"stopping with {self.config.early_stopping_method.value}"
            )
            result = await self._stop_early(input, history, cancellation_token)

        log.info(
            f"Run completed: iterations={iterations}, actions={len(history)}, "
            f"answer_len={len(result.text)}"
        )
        bus.agent_finished(result)
        return result

    def _check_agent_tools(self) -> None:
        """The tools the agent advertises must be the ones this executor runs."""
        agent_tools = getattr(self.agent, "tools", None)
        if agent_tools is None:
            return
        advertised = {tool.name for tool in agent_tools}
        available = set(self.tool_map)
        if advertised != available:
            raise ToolValidationError(
                "Agent and executor tools differ: "
                f"missing={sorted(advertised - available)}, "
                f"unadvertised={sorted(available - advertised)}"
            )

    # ========================================================================
    # Budget
    # ========================================================================

    def _should_continue(self, iterations: int, start_time: float) -> bool:
        max_iterations = self.config.max_iterations
        if max_iterations is not None and iterations >= max_iterations:
            return False
        max_time = self.config.max_execution_time
        if max_time is not None and time.monotonic() - start_time >= max_time:
            return False
        return True

    def _call_timeout(self, start_time: float) -> Optional[float]:
        """The tighter of the per-call timeout and the time left in the run."""
        limits = []
        if self.config.request_timeout is not None:
            limits.append(self.config.request_timeout)
        if self.config.max_execution_time is not None:
            remaining = self.config.max_execution_time - (time.monotonic() - start_time)
            limits.append(max(remaining, 0.0))
        return min(limits) if limits else None

    async def _stop_early(
        self,
        input: InputT,
        history: list[ActionRecord],
        cancellation_token: Optional[asyncio.Event],
    ) -> FinishResult[Output]:
        strategy = self.config.early_stopping_method
        try:
            return await self.agent.return_stopped_response(
                input,
                strategy,
                tuple(history),
                timeout=self.config.request_timeout,
                cancellation_token=cancellation_token,
            )
        except DecisionCancelledError as e:
            log.warning(f"Final answer call stopped ({e.reason}), forcing a result")
            return await self.agent.return_stopped_response(
                input, EarlyStopStrategy.FORCE, tuple(history)
            )

    # ========================================================================
    # Tool execution
    # ========================================================================

    async def _execute_actions(
        self,
        actions: Sequence[ActionRecord],
        bus: CallbackBus,
    ) -> list[ActionRecord]:
        """Run one batch and return the observed actions in proposal order."""
        log.debug(f"Executing {len(actions)} action(s)")

        if self.config.parallel_tool_calls and len(actions) > 1:
            for action in actions:
                bus.action_started(action)
            observations = await asyncio.gather(
                *(execute_tool(self.tool_map, action) for action in actions)
            )
            completed = [
                action.with_observation(observation)
                for action, observation in zip(actions, observations)
            ]
            for action in completed:
                bus.action_ended(action)
            return completed

        completed = []
        for action in actions:
            bus.action_started(action)
            observed = action.with_observation(
                await execute_tool(self.tool_map, action)
            )
            bus.action_ended(observed)
            completed.append(observed)
        return completed
