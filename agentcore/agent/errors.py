"""Exceptions raised by the agent decision loop."""

from typing import Literal


class AgentError(Exception):
    """Base class for agentcore errors."""


class BackendError(AgentError):
    """The reasoning backend could not be reached or failed to answer.

    Never recovered inside the decision step. The driver decides whether to
    retry the iteration or abort the run.
    """


class DecisionCancelledError(AgentError):
    """The backend call was cancelled or ran out of time.

    Always resolved through the force early-stop path, never retried.
    """

    def __init__(self, reason: Literal["cancelled", "timeout"] = "cancelled"):
        super().__init__(f"Backend call {reason}.")
        self.reason = reason


class ToolValidationError(AgentError):
    """The tool set handed to an agent is not usable by that agent."""
