"""
Lookup Models

Pydantic models for the span lookup path:

- LookupRequest: the selected span, its surrounding context and position
- DictionaryEntry / EncyclopediaSummary: structured source results
- SourceState: per-source {data, loading, error}
- PopoverState: visibility, request, active tab and the per-source map
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from spanlens.core.config.constants import CASCADE_ORDER, LookupSource

# ============================================================================
# REQUEST
# ============================================================================


class Position(BaseModel):
    """Screen position of the selection (opaque to the engine)."""

    x: float = 0
    y: float = 0


class LookupRequest(BaseModel):
    """
    A user selection to explain.

    ``span_text`` is stored trimmed and must be non-empty. The upper bound is
    enforced by the resolver from settings (MAX_SPAN_LENGTH).
    """

    model_config = ConfigDict(frozen=True)

    span_text: str = Field(..., min_length=1, description="Selected text")
    context: str = Field(default="", description="Surrounding text")
    position: Position | None = Field(default=None, description="Where the selection is")

    @field_validator("span_text", mode="before")
    @classmethod
    def strip_span(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v

    @property
    def words(self) -> list[str]:
        return self.span_text.split()

    @property
    def word_count(self) -> int:
        return len(self.words)

    @property
    def dictionary_key(self) -> str:
        """First whitespace-delimited token, lower-cased."""
        return self.words[0].lower()

    @property
    def encyclopedia_key(self) -> str:
        """The full trimmed span."""
        return self.span_text


# ============================================================================
# SOURCE RESULTS
# ============================================================================


class Definition(BaseModel):
    definition: str
    example: str | None = None


class Meaning(BaseModel):
    part_of_speech: str = Field(default="", alias="partOfSpeech")
    definitions: list[Definition] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)


class DictionaryEntry(BaseModel):
    """One dictionary entry for a word."""

    word: str
    phonetic: str | None = None
    meanings: list[Meaning] = Field(default_factory=list)


class Thumbnail(BaseModel):
    source: str
    width: int | None = None
    height: int | None = None


class EncyclopediaSummary(BaseModel):
    """Article summary plus a link to the full page."""

    title: str
    extract: str
    page_url: str
    thumbnail: Thumbnail | None = None


# ============================================================================
# STATE
# ============================================================================


class SourceState(BaseModel):
    """
    Per-source lookup state.

    Exactly one of {data, loading, error, empty} holds, except the assistant
    source which keeps partial ``data`` while ``loading`` during streaming.
    """

    data: Any = None
    loading: bool = False
    error: str | None = None

    @property
    def is_empty(self) -> bool:
        return self.data is None and not self.loading and self.error is None

    @property
    def is_cached(self) -> bool:
        """True when a manual tab switch must not refetch."""
        return not self.is_empty

    def reset(self) -> None:
        self.data = None
        self.loading = False
        self.error = None

    def start(self) -> None:
        self.data = None
        self.loading = True
        self.error = None

    def succeed(self, data: Any) -> None:
        self.data = data
        self.loading = False
        self.error = None

    def stream(self, partial: str) -> None:
        self.data = partial
        self.loading = True
        self.error = None

    def fail(self, message: str) -> None:
        self.data = None
        self.loading = False
        self.error = message


def _empty_sources() -> dict[LookupSource, SourceState]:
    return {source: SourceState() for source in CASCADE_ORDER}


class PopoverState(BaseModel):
    """
    State of the explanation popover.

    When ``visible`` is False nothing is in flight and every source is empty.
    """

    visible: bool = False
    request: LookupRequest | None = None
    active_tab: LookupSource = LookupSource.DICTIONARY
    sources: dict[LookupSource, SourceState] = Field(default_factory=_empty_sources)

    def source(self, source: LookupSource) -> SourceState:
        return self.sources[source]

    def reset_sources(self) -> None:
        for state in self.sources.values():
            state.reset()

    def snapshot(self) -> dict[str, Any]:
        """Plain-dict view for observers and logging."""
        return self.model_dump(mode="json")
