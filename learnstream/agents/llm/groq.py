from openai import AsyncOpenAI
from learnstream.agents.llm.base import LLMClient

class GroqOpenAIClient(LLMClient):
    def __init__(self, * , api_key: str | None, base_url: str, model: str):
        self.client = AsyncOpenAI(api_key=api_key, base_url=base_url)
        self.model = model

    async def generate_text(self, *, system: str, user: str, temperature: float = 0.2) -> str:
        resp = await self.client.chat.completions.create(
            model=self.model,
            temperature=temperature,
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
        )
        return (resp.choices[0].message.content or "").strip()

    async def aclose(self) -> None:
        await self.client.close()
