"""agentcore: the decision loop of a tool-augmented reasoning agent."""

__version__ = "0.1.0"
