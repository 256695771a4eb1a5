"""
Type definitions for the agent decision loop.

Includes:
- ActionRecord for one tool invocation and its observation
- FinishResult / ReturnValue for the terminal outcome of a run
- NextStep variants (Actions, Finish, Thought) for one decision
- Scratchpad / AgentInput for what is sent to the backend
- AgentConfig for per-run policy
"""

import os
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Generic, Optional, TypeVar

from dotenv import load_dotenv
from pydantic import BaseModel, Field, model_validator

Output = TypeVar("Output", bound=BaseModel)
Content = TypeVar("Content")
InputT = TypeVar("InputT")


# ============================================================================
# Action Records
# ============================================================================


@dataclass(frozen=True)
class ActionRecord:
    """One tool invocation proposed by the backend.

    A record whose ``observation`` is None is still pending execution.
    """

    tool: str
    tool_input: str
    log: str
    observation: Optional[str] = None
    call_id: Optional[str] = None  # backend tool-call id, if it issued one

    @property
    def is_pending(self) -> bool:
        return self.observation is None

    def with_observation(self, observation: str) -> "ActionRecord":
        """Return a copy of this record with the tool result attached."""
        return replace(self, observation=observation)


# ============================================================================
# Finish Results
# ============================================================================


@dataclass(frozen=True)
class Structured(Generic[Output]):
    """A return value validated against the caller's output schema."""

    value: Output


@dataclass(frozen=True)
class Unstructured:
    """A free-text return value."""

    text: str


ReturnValue = Structured | Unstructured


@dataclass(frozen=True)
class FinishResult(Generic[Output]):
    """Terminal outcome of a run, produced exactly once."""

    return_value: ReturnValue
    log: str

    @classmethod
    def unstructured(cls, text: str, log: str = "") -> "FinishResult":
        return cls(return_value=Unstructured(text), log=log)

    @classmethod
    def structured(cls, value: Output, log: str = "") -> "FinishResult":
        return cls(return_value=Structured(value), log=log)

    @property
    def text(self) -> str:
        """The answer rendered as text, whichever form it took."""
        if isinstance(self.return_value, Structured):
            return self.return_value.value.model_dump_json()
        return self.return_value.text


# ============================================================================
# Next Step Decisions
# ============================================================================


@dataclass(frozen=True)
class Actions:
    """The backend wants these tools executed, in this order."""

    actions: tuple[ActionRecord, ...]

    def __post_init__(self):
        # Accept any iterable but store an immutable one
        actions = tuple(self.actions)
        if not actions:
            raise ValueError("Actions requires at least one action.")
        object.__setattr__(self, "actions", actions)


@dataclass(frozen=True)
class Finish:
    """The backend produced its terminal answer."""

    result: FinishResult


@dataclass(frozen=True)
class Thought:
    """Intermediate reasoning with neither a tool call nor an answer."""

    text: str


NextStep = Actions | Finish | Thought


# ============================================================================
# Scratchpad & Backend Input
# ============================================================================


@dataclass(frozen=True)
class Scratchpad(Generic[Content]):
    """Backend-specific rendering of the run history."""

    content: Content


@dataclass
class AgentInput(Generic[InputT, Content]):
    """The single structured request sent to the backend."""

    input: InputT
    scratchpad: Scratchpad[Content]
    metadata: dict[str, Any] = field(default_factory=dict)


class EarlyStopStrategy(str, Enum):
    FORCE = "force"
    GENERATE = "generate"


# ============================================================================
# Agent Configuration
# ============================================================================


class AgentConfig(BaseModel):
    """Per-run policy for the agent executor."""

    model: str = "google/gemini-2.5-flash-lite-preview-09-2025"
    max_iterations: Optional[int] = Field(
        10, ge=1, description="Decision steps allowed before early stop."
    )
    max_execution_time: Optional[float] = Field(
        None, gt=0, description="Wall-clock budget for the run, in seconds."
    )
    early_stopping_method: EarlyStopStrategy = EarlyStopStrategy.FORCE
    request_timeout: Optional[float] = Field(
        None, gt=0, description="Timeout for a single backend call, in seconds."
    )
    parallel_tool_calls: bool = Field(
        False, description="Run the tools of one batch concurrently."
    )

    @model_validator(mode="after")
    def check_budget(self) -> "AgentConfig":
        if self.max_iterations is None and self.max_execution_time is None:
            raise ValueError(
                "Set max_iterations or max_execution_time; a run needs a budget."
            )
        return self

    @classmethod
    def from_env(cls) -> "AgentConfig":
        """Build a config from AGENT_* environment variables (.env aware)."""
        load_dotenv()
        values: dict[str, Any] = {}

        env_map = {
            "AGENT_MODEL": "model",
            "AGENT_MAX_ITERATIONS": "max_iterations",
            "AGENT_MAX_EXECUTION_TIME": "max_execution_time",
            "AGENT_EARLY_STOPPING_METHOD": "early_stopping_method",
            "AGENT_REQUEST_TIMEOUT": "request_timeout",
            "AGENT_PARALLEL_TOOL_CALLS": "parallel_tool_calls",
        }
        for env_key, field_name in env_map.items():
            raw = os.getenv(env_key)
            if raw is not None and raw != "":
                values[field_name] = raw

        # pydantic coerces the strings to the declared field types
        return cls.model_validate(values)
