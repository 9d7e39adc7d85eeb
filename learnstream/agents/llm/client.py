from learnstream.settings import Settings, settings as default_settings
from learnstream.agents.llm.base import LLMClient
from learnstream.agents.llm.ollama import OllamaOpenAIClient
from learnstream.agents.llm.groq import GroqOpenAIClient

def get_llm_client(settings: Settings | None = None) -> LLMClient:
    settings = settings or default_settings
    if settings.LLM_PROVIDER == "groq":
        return GroqOpenAIClient(
            api_key=settings.GROQ_API_KEY,
            base_url=settings.GROQ_BASE_URL,
            model=settings.GROQ_MODEL,
        )

    return OllamaOpenAIClient(
        base_url = settings.ollama_base_url,
        model = settings.ollama_model,
    )
