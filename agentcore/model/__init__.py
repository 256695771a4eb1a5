from agentcore.model.chain import ChatModelChain, PromptBuilder
from agentcore.model.llm import get_chat_llm, DEFAULT_MODEL

__all__ = [
    "ChatModelChain",
    "PromptBuilder",
    "get_chat_llm",
    "DEFAULT_MODEL",
]
