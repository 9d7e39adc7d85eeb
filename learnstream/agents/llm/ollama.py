import httpx
from learnstream.agents.llm.base import LLMClient

class OllamaOpenAIClient(LLMClient):
    def __init__(self, base_url: str, model: str, *, timeout: float = 120,
    client: httpx.AsyncClient | None = None):
        self.base_url = base_url.rstrip("/")
        self.model = model
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def generate_text(self, * , system: str, user: str, temperature: float = 0.2) -> str:
        # Ollama OpenAI-compatible endpoint
        # POST {base_url}/chat/completions with OpenAI message format

        url = f"{self.base_url}/chat/completions"
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            "temperature": temperature
        }

        headers = {
            "Content-Type": "application/json",
            #OpenAI-compatible clients require an api key field; Ollama ignores it
            "Authorization": "Bearer ollama",
        }

        r = await self._client.post(url, json=payload, headers=headers)
        r.raise_for_status()
        data = r.json()

        return data["choices"][0]["message"]["content"]

    async def aclose(self) -> None:
        await self._client.aclose()
