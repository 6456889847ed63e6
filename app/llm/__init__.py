from app.llm.client import LLMClient, OpenAIClient, build_llm_client
from app.llm.schemas import RecordAssistance

__all__ = ["LLMClient", "OpenAIClient", "RecordAssistance", "build_llm_client"]
