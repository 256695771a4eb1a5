import os
from typing import Optional

from dotenv import load_dotenv
from langchain_openai import ChatOpenAI

load_dotenv()


DEFAULT_MODEL = "google/gemini-2.5-flash-lite-preview-09-2025"
DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"


def get_chat_llm(
    model: str = DEFAULT_MODEL,
    base_url: str = DEFAULT_BASE_URL,
    timeout: Optional[float] = 30,
) -> ChatOpenAI:
    """初始化并配置 LangChain ChatOpenAI 实例

    Args:
        model (str): Model name understood by the OpenAI-compatible endpoint.
        base_url (str): Endpoint, overridden by ``OPENAI_BASE_URL``.
        timeout (Optional[float]): HTTP timeout of the client, in seconds.

    Raises:
        ValueError: ``OPENAI_API_KEY`` is not set.
    """
    base_url = os.getenv("OPENAI_BASE_URL", base_url)
    api_key = os.getenv("OPENAI_API_KEY", "")

    if not api_key:
        raise ValueError("OPENAI_API_KEY environment variable is not set.")

    return ChatOpenAI(
        model=model,
        api_key=api_key,
        base_url=base_url,
        timeout=timeout,
    )
