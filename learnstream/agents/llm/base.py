## Base LLM Client Interface
from abc import ABC, abstractmethod

class LLMClient(ABC):
    @abstractmethod
    async def generate_text(self, * , system: str, user: str, temperature: float = 0.2) -> str:
        raise NotImplementedError

    async def aclose(self) -> None:
        pass
