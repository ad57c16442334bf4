"""
Two-fact generator over an OpenAI-compatible chat-completions endpoint
(OpenRouter by default, any compatible URL works).

Requires OPENROUTER_API_KEY (bearer auth).
"""
from typing import Optional, List

from pydantic import BaseModel

from arfacts.adapters.http.json_client import HttpJsonClient
from arfacts.adapters.llm.base import FactsAdapter
from arfacts.orchestrator.errors import EmptyCompletion, ParseFailure

OPENROUTER_API_URL = "https://openrouter.ai/api/v1/chat/completions"
DEFAULT_MODEL = "deepseek/deepseek-chat-v3-0324:free"

SYSTEM_PROMPT = (
    "You are a concise information provider for an AR application. "
    "Respond with exactly the format requested, without any additional text, "
    "introductions, or commentary. Be direct and informative."
)


def user_prompt(label: str) -> str:
    return (
        f"Identify this object as '{label}' and provide exactly 2 fun and interesting facts about it. "
        f"Format your response like this: 'This is a {label}. [Fact 1] [Fact 2]' "
        "Do not add any introductions, conclusions, or other commentary."
    )


class ChatMessage(BaseModel):
    role: str = "assistant"
    content: Optional[str] = None


class ChatChoice(BaseModel):
    message: Optional[ChatMessage] = None
    finish_reason: Optional[str] = None


class ChatResponse(BaseModel):
    choices: List[ChatChoice] = []


class OpenRouterFacts(FactsAdapter):
    def __init__(
        self,
        status_store,
        http: HttpJsonClient,
        api_key: Optional[str],
        model: str = DEFAULT_MODEL,
        url: str = OPENROUTER_API_URL,
        temperature: float = 0.7,
        max_tokens: int = 300,
    ):
        self.status = status_store
        self.http = http
        self._api_key = api_key
        self.model = model
        self.url = url
        self.temperature = temperature
        self.max_tokens = max_tokens
        self._ready = bool(api_key)
        if self._ready:
            self.status.log(f"openrouter_facts: ready (model={model})")
        else:
            self.status.log("openrouter_facts: OPENROUTER_API_KEY not set")

    def build_payload(self, label: str) -> dict:
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": user_prompt(label)},
            ],
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }

    async def generate_facts(self, label: str) -> str:
        self.status.log(f"openrouter_facts: generating for '{label}'")
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }
        try:
            resp = await self.http.send(
                self.url, self.build_payload(label), response_model=ChatResponse, headers=headers,
            )
        except ParseFailure as e:
            raise EmptyCompletion(str(e)) from e

        if not resp.choices:
            raise EmptyCompletion("completion has no choices")
        message = resp.choices[0].message
        if message is None or not message.content or not message.content.strip():
            raise EmptyCompletion("first choice has no content")

        self.status.log(f"openrouter_facts: {len(message.content)} chars")
        return message.content
