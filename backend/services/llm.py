from llama_index.llms.openai import OpenAI

from backend.config import settings


def get_llm(model: str, temperature: float = 0.2) -> OpenAI:
    if not settings.openai_api_key:
        raise RuntimeError("OPENAI_API_KEY is missing")
    return OpenAI(
        model=model,
        api_key=settings.openai_api_key,
        temperature=temperature,
        timeout=settings.llm_timeout_seconds,
    )
