"""Provider-agnostic turns, options, results and stream events."""

from __future__ import annotations

import base64
import re
from collections.abc import Iterable
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

Role = Literal["system", "user", "assistant"]

DATA_URI_PATTERN = re.compile(r"^data:([^;]+);base64,(.+)$", re.DOTALL)


def parse_data_uri(url: str) -> tuple[str, str] | None:
    """Split a ``data:<mime>;base64,<payload>`` URI into (mime type, payload)."""
    match = DATA_URI_PATTERN.match(url)
    if match is None:
        return None
    return match.group(1), match.group(2)


class TextPart(BaseModel):
    """Text content part of a multimodal turn."""

    type: Literal["text"] = "text"
    text: str


class ImageUrl(BaseModel):
    url: str


class ImagePart(BaseModel):
    """Image content part carried as a base64 data URI."""

    type: Literal["image_url"] = "image_url"
    image_url: ImageUrl

    @classmethod
    def from_bytes(cls, mime_type: str, data: bytes) -> ImagePart:
        """Build an image part from already-decoded upload bytes."""
        encoded = base64.b64encode(data).decode("ascii")
        return cls.from_url(f"data:{mime_type};base64,{encoded}")

    @classmethod
    def from_url(cls, url: str) -> ImagePart:
        return cls(image_url=ImageUrl(url=url))

    @property
    def url(self) -> str:
        return self.image_url.url

    def parse(self) -> tuple[str, str] | None:
        """Return (mime type, base64 data), or None if the URI is not base64 data."""
        return parse_data_uri(self.url)


ContentPart = Annotated[Union[TextPart, ImagePart], Field(discriminator="type")]


class Turn(BaseModel):
    """One message of a conversation as handed to a provider."""

    role: Role
    content: str | list[ContentPart]

    @field_validator("content")
    @classmethod
    def _content_not_empty(cls, v: str | list[Any]) -> str | list[Any]:
        if isinstance(v, list) and not v:
            raise ValueError("content parts must not be empty")
        return v

    @property
    def has_images(self) -> bool:
        return isinstance(self.content, list) and any(
            isinstance(part, ImagePart) for part in self.content
        )


def turns_have_images(turns: Iterable[Turn]) -> bool:
    return any(turn.has_images for turn in turns)


class GenerationOptions(BaseModel):
    """Caller tuning knobs; unrecognized keys are ignored."""

    model_config = ConfigDict(extra="ignore")

    temperature: float = Field(0.7, ge=0.0, le=2.0)
    max_tokens: int = Field(1000, ge=1, le=4000)


class GenerationResult(BaseModel):
    """Normalized result of a non-streaming call."""

    model_config = ConfigDict(frozen=True)

    content: str
    # literal model id actually used
    model: str
    usage: dict[str, Any] | None = None


class StreamStarted(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["started"] = "started"
    model: str
    provider: str


class StreamChunk(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["chunk"] = "chunk"
    text: str


class StreamCompleted(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["completed"] = "completed"
    final_text: str
    model: str


class StreamFailed(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["failed"] = "failed"
    error_kind: str
    message: str


StreamEvent = Annotated[
    Union[StreamStarted, StreamChunk, StreamCompleted, StreamFailed],
    Field(discriminator="type"),
]
