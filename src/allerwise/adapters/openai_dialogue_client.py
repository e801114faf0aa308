"""OpenAI chat and speech client for training conversations."""

from dataclasses import dataclass

from openai import AsyncOpenAI

from allerwise.services.training import DialogueClient, SpeechClient


@dataclass
class OpenAIDialogueClient(DialogueClient, SpeechClient):
    """Dialogue and text-to-speech backed by the OpenAI API."""

    client: AsyncOpenAI

    @classmethod
    def create(cls, api_key: str) -> "OpenAIDialogueClient":
        """Create an OpenAI dialogue client."""
        return cls(client=AsyncOpenAI(api_key=api_key))

    async def complete(  # noqa: PLR0913
        self,
        *,
        model: str,
        system_prompt: str,
        user_input: str,
        max_tokens: int,
        temperature: float,
    ) -> str:
        """Call chat completions and return the first choice's text."""
        response = await self.client.chat.completions.create(
            model=model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_input},
            ],
            max_tokens=max_tokens,
            temperature=temperature,
        )
        if not response.choices:
            raise RuntimeError("OpenAI returned no choices")
        return response.choices[0].message.content or ""

    async def synthesize(self, *, model: str, text: str, voice: str) -> bytes:
        """Render text as mp3 audio."""
        response = await self.client.audio.speech.create(
            model=model,
            input=text,
            voice=voice,
            response_format="mp3",
            speed=1.0,
        )
        return response.content

    async def close(self) -> None:
        await self.client.close()
