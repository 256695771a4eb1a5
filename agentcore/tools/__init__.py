from agentcore.tools.executor import decode_tool_input, execute_tool, format_observation

__all__ = ["decode_tool_input", "execute_tool", "format_observation"]
