"""Language model rewrite provider.

Prompts an OpenAI-compatible chat completions endpoint to retell the dream
as a first-person story in the requested tone, in the spirit of imagery
rehearsal therapy.
"""

import httpx

from ..config.settings import RemicConfig
from ..exceptions import EmptyRewriteError, ServiceResponseError
from ..models.dream import Tone
from .rewrite import HttpRewriteService

STORYTELLER_INSTRUCTIONS = """\
You are a master storyteller and therapeutic writing specialist trained in Imagery Rehearsal Therapy.
You transform nightmares and distressing dreams into healing, empowering narratives.

Write rich, evocative prose with varied sentence rhythms and vivid sensory details.
Fear turns into courage and curiosity, threats become protectors or allies,
chaos resolves into peace, and isolation becomes connection.
Open with the transformed scene, show the dreamer moving with confidence,
build to the moment where darkness becomes light, and close with lasting peace."""

PROMPT_TEMPLATE = """\
Transform this dream into a beautifully written {tone} story.

TONE: {guidance}

WRITING REQUIREMENTS:
1. First-person perspective ("I") throughout; the dreamer is the protagonist
2. 4-6 paragraphs of polished, literary prose
3. Include at least 3 specific sensory details
4. Show emotional transformation through the narrative arc
5. End with a resonant conclusion that leaves the reader feeling peaceful

ORIGINAL DREAM TO TRANSFORM:
{original}

Now write the transformed dream as a healing story:"""


def build_prompt(original_text: str, tone: Tone) -> str:
    return PROMPT_TEMPLATE.format(tone=tone.value, guidance=tone.guidance, original=original_text)


class LanguageModelRewriteService(HttpRewriteService):
    """Rewrite dreams with a chat completions model."""

    name = "llm"

    def __init__(
        self,
        base_url: str,
        api_key: str,
        model: str,
        temperature: float = 0.8,
        **kwargs,
    ):
        super().__init__(base_url, token=api_key, **kwargs)
        self.model = model
        self.temperature = temperature

    @classmethod
    def from_config(
        cls, settings: RemicConfig, transport: httpx.AsyncBaseTransport | None = None
    ) -> "LanguageModelRewriteService":
        return cls(
            settings.llm_base_url,
            api_key=settings.llm_api_key,
            model=settings.llm_model,
            temperature=settings.llm_temperature,
            max_attempts=settings.rewrite_max_attempts,
            retry_wait=settings.rewrite_retry_wait,
            request_timeout=settings.rewrite_timeout,
            transport=transport,
        )

    async def rewrite(self, original_text: str, tone: Tone) -> str:
        payload = {
            "model": self.model,
            "temperature": self.temperature,
            "messages": [
                {"role": "system", "content": STORYTELLER_INSTRUCTIONS},
                {"role": "user", "content": build_prompt(original_text, tone)},
            ],
        }

        data = await self._post_json("/chat/completions", payload)

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise ServiceResponseError("Language model response has no message content") from e
        if not isinstance(content, str) or not content.strip():
            raise EmptyRewriteError("Language model returned an empty rewrite")
        return content.strip()
