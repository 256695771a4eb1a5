"""
Run-scoped event bus for observing an agent run.

Observers see three events, in order:
- ActionStartEvent before a tool runs
- ActionEndEvent once its observation is attached
- AgentFinishEvent with the run's FinishResult, always last

The bus is a side channel. Observers cannot reach the decision state and a
failing observer never interrupts the run.
"""

from dataclasses import dataclass
from typing import Callable, Iterable, Literal, Optional

from agentcore.agent.types import ActionRecord, FinishResult
from agentcore.utils.logger import get_logger

log = get_logger(__name__)


# ============================================================================
# Events
# ============================================================================


@dataclass(frozen=True)
class ActionStartEvent:
    """Emitted with the pending action before its tool executes."""

    action: ActionRecord
    type: Literal["action_start"] = "action_start"


@dataclass(frozen=True)
class ActionEndEvent:
    """Emitted with the observed action after its tool returned."""

    action: ActionRecord
    type: Literal["action_end"] = "action_end"


@dataclass(frozen=True)
class AgentFinishEvent:
    """Emitted once per run with the final result."""

    result: FinishResult
    type: Literal["agent_finish"] = "agent_finish"


CallbackEvent = ActionStartEvent | ActionEndEvent | AgentFinishEvent

CallbackHandler = Callable[[CallbackEvent], None]


# ============================================================================
# Callback Bus
# ============================================================================


class CallbackBus:
    """Ordered fan-out of run events to registered handlers.

    Create one bus per run; handlers registered on one run never hear
    another run's events.
    """

    def __init__(self, handlers: Optional[Iterable[CallbackHandler]] = None):
        self._handlers: list[CallbackHandler] = list(handlers or [])
        self._finished = False

    def register(self, handler: CallbackHandler) -> None:
        self._handlers.append(handler)

    def unregister(self, handler: CallbackHandler) -> None:
        if handler in self._handlers:
            self._handlers.remove(handler)

    @property
    def finished(self) -> bool:
        return self._finished

    def emit(self, event: CallbackEvent) -> None:
        """Deliver an event to every handler in registration order."""
        if self._finished:
            log.warning(f"Dropping {event.type} event emitted after the run finished")
            return
        if isinstance(event, AgentFinishEvent):
            self._finished = True

        for handler in list(self._handlers):
            try:
                handler(event)
            except Exception as e:
                log.warning(f"Callback handler {handler!r} failed on {event.type}: {e}")

    def action_started(self, action: ActionRecord) -> None:
        self.emit(ActionStartEvent(action=action))

    def action_ended(self, action: ActionRecord) -> None:
        self.emit(ActionEndEvent(action=action))

    def agent_finished(self, result: FinishResult) -> None:
        self.emit(AgentFinishEvent(result=result))
