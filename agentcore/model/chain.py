"""
The reasoning backend boundary.

ChatModelChain turns an AgentInput into chat messages, sends them to a
LangChain chat model and returns the raw AIMessage. It is the only place the
decision loop suspends, so it owns timeout and cancellation handling.
"""

import asyncio
from typing import Any, Callable, Optional, Sequence

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage

from agentcore.agent.errors import BackendError, DecisionCancelledError
from agentcore.agent.types import AgentInput
from agentcore.utils.logger import get_logger

log = get_logger(__name__)

PromptBuilder = Callable[[AgentInput], Sequence[BaseMessage]]


class ChatModelChain:
    """Prompt + chat model, called once per decision step."""

    def __init__(
        self,
        llm: BaseChatModel,
        prompt: PromptBuilder,
        tools: Optional[Sequence[Any]] = None,
        timeout: Optional[float] = None,
    ):
        self.llm = llm
        self.prompt = prompt
        self.timeout = timeout
        # Tools (or pydantic schemas) the model may call natively
        self.runnable = llm.bind_tools(list(tools)) if tools else llm

    async def call(
        self,
        agent_input: AgentInput,
        *,
        timeout: Optional[float] = None,
        cancellation_token: Optional[asyncio.Event] = None,
    ) -> AIMessage:
        """Send one request to the backend and wait for its reply.

        Args:
            agent_input (AgentInput): Task input plus scratchpad.
            timeout (Optional[float]): Overrides the chain timeout for this call.
            cancellation_token (Optional[asyncio.Event]): Set it to abandon the call.

        Returns:
            AIMessage: The raw backend response.

        Raises:
            DecisionCancelledError: The token was set or the timeout fired.
            BackendError: Any other failure while talking to the backend.
        """
        if cancellation_token and cancellation_token.is_set():
            raise DecisionCancelledError("cancelled")

        messages = list(self.prompt(agent_input))
        effective_timeout = timeout if timeout is not None else self.timeout
        log.debug(
            f"Calling backend: messages={len(messages)}, timeout={effective_timeout}"
        )

        request = asyncio.ensure_future(self.runnable.ainvoke(messages))
        waiters: set[asyncio.Future] = {request}
        cancel_waiter: Optional[asyncio.Future] = None
        if cancellation_token is not None:
            cancel_waiter = asyncio.ensure_future(cancellation_token.wait())
            waiters.add(cancel_waiter)

        try:
            done, _ = await asyncio.wait(
                waiters,
                timeout=effective_timeout,
                return_when=asyncio.FIRST_COMPLETED,
            )
        except asyncio.CancelledError:
            request.cancel()
            raise
        finally:
            if cancel_waiter is not None:
                cancel_waiter.cancel()

        if request not in done:
            request.cancel()
            reason = "cancelled" if cancel_waiter in done else "timeout"
            log.warning(f"Backend call abandoned: {reason}")
            raise DecisionCancelledError(reason)

        try:
            response = request.result()
        except asyncio.CancelledError:
            raise DecisionCancelledError("cancelled")
        except Exception as e:
            log.error(f"Backend call failed: {e}")
            raise BackendError(str(e)) from e

        if not isinstance(response, AIMessage):
            raise BackendError(
                f"Backend returned {type(response).__name__}, expected AIMessage"
            )
        return response
