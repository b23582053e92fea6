"""Dream journal models."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..exceptions import AlreadyRewrittenError, InvariantViolation, ValidationError


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Tone(str, Enum):
    """Emotional register requested for a rewrite."""
    HAPPY = "happy"
    FUNNY = "funny"
    HOPEFUL = "hopeful"
    CALM = "calm"
    POSITIVE = "positive"

    @classmethod
    def parse(cls, value: "Tone | str") -> "Tone":
        """Parse a tone name case-insensitively.

        Raises:
            ValidationError: If the value is not one of the known tones
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        allowed = ", ".join(t.value for t in cls)
        raise ValidationError(f"Unknown tone {value!r}; expected one of: {allowed}")

    @classmethod
    def from_mood(cls, mood: str) -> "Tone":
        """Map a suggested mood from dream analysis to the closest tone."""
        return _MOOD_TO_TONE.get(mood.strip().lower(), cls.HOPEFUL)

    @property
    def mood_type(self) -> str:
        """Name the dream backend uses for this tone."""
        return _MOOD_TYPES[self]

    @property
    def guidance(self) -> str:
        """Writing guidance used when prompting a language model."""
        return _GUIDANCE[self]


_MOOD_TYPES = {
    Tone.HAPPY: "happy",
    Tone.FUNNY: "humorous",
    Tone.HOPEFUL: "empowering",
    Tone.CALM: "peaceful",
    Tone.POSITIVE: "empowering",
}

_MOOD_TO_TONE = {
    "peaceful": Tone.CALM,
    "calm": Tone.CALM,
    "serene": Tone.CALM,
    "humorous": Tone.FUNNY,
    "funny": Tone.FUNNY,
    "lighthearted": Tone.FUNNY,
    "empowering": Tone.POSITIVE,
    "positive": Tone.POSITIVE,
    "confident": Tone.POSITIVE,
    "hopeful": Tone.HOPEFUL,
    "optimistic": Tone.HOPEFUL,
    "inspiring": Tone.HOPEFUL,
    "happy": Tone.HAPPY,
    "joyful": Tone.HAPPY,
    "cheerful": Tone.HAPPY,
}

_GUIDANCE = {
    Tone.HAPPY: (
        "Radiant joy and pure delight. The world is vibrant and alive with color. "
        "Unexpected pleasures unfold at every turn and laughter comes naturally. "
        "The atmosphere feels like sunshine after rain."
    ),
    Tone.FUNNY: (
        "Playful absurdity and gentle humor. Scary things become endearingly silly "
        "or hilariously incompetent. Turn tension into laughter and danger into slapstick, "
        "with witty inner monologue and good comedic timing."
    ),
    Tone.HOPEFUL: (
        "Dawn breaking after a long night. Darkness gradually gives way to warm golden light "
        "and every obstacle reveals a hidden path forward. The future feels bright and full of promise."
    ),
    Tone.CALM: (
        "Deep serenity and tranquil peace. Slow, gentle rhythms like breathing, soft light, "
        "quiet sounds and comforting textures. The dreamer feels safe, held and completely at ease."
    ),
    Tone.POSITIVE: (
        "Empowerment and personal triumph. The dreamer discovers strength they never knew they had. "
        "Fear turns into courage and challenges become chances to grow. "
        "The dreamer emerges stronger and more confident."
    ),
}


class Dream(BaseModel):
    """A journal entry with an optional toned rewrite.

    Records are immutable. The only allowed change is the one-time
    pending -> rewritten transition, which yields a new record through
    ``with_rewrite``.
    """
    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4, description="Unique dream identifier")
    original_text: str = Field(..., min_length=1, description="Text as the dreamer wrote it")
    rewritten_text: str | None = Field(None, description="Rewrite produced by the rewrite service")
    tone: Tone | None = Field(None, description="Tone of the rewrite")
    date: datetime = Field(default_factory=utc_now, description="Creation timestamp")

    @field_validator("original_text")
    @classmethod
    def check_original_text(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("original_text cannot be blank")
        return v

    @field_validator("date")
    @classmethod
    def normalize_date(cls, v: datetime) -> datetime:
        """Store every timestamp in UTC; naive timestamps are taken to be UTC."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)

    @model_validator(mode="after")
    def check_rewrite_pair(self) -> "Dream":
        if (self.rewritten_text is None) != (self.tone is None):
            raise InvariantViolation(
                f"Dream {self.id}: rewritten_text and tone must be set together"
            )
        return self

    @property
    def is_rewritten(self) -> bool:
        return self.rewritten_text is not None

    def with_rewrite(self, rewritten_text: str, tone: Tone) -> "Dream":
        """Return the rewritten version of this dream.

        Raises:
            InvariantViolation: If either half of the pair is missing
            AlreadyRewrittenError: If the dream already has a rewrite
        """
        if not rewritten_text or tone is None:
            raise InvariantViolation(
                f"Dream {self.id}: a rewrite needs both rewritten text and tone"
            )
        if self.is_rewritten:
            raise AlreadyRewrittenError(self.id)
        data: dict[str, Any] = self.model_dump()
        data.update(rewritten_text=rewritten_text, tone=Tone.parse(tone))
        return Dream.model_validate(data)


class DreamCollection(BaseModel):
    """On-disk document holding the whole dream collection."""
    version: int = Field(1, description="Storage format version")
    dreams: list[Dream] = Field(default_factory=list)
