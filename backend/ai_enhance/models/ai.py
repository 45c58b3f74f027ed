from pydantic import BaseModel, ConfigDict, Field


class ModelDescriptor(BaseModel):
    """One installed model as reported by Ollama's /api/tags."""

    model_config = ConfigDict(frozen=True)

    name: str  # e.g. "llama3.2:1b"
    size: int = Field(ge=0)
    modified_at: str  # opaque, passed through as returned


class FeatureFlags(BaseModel):
    punctuation_and_capitalization: bool
    remove_filler_words: bool
    normalize_numbers: bool
    fix_spelling: bool


class PullProgressTick(BaseModel):
    """A single NDJSON line from the /api/pull stream."""

    status: str
    completed: int | None = Field(default=None, ge=0)
    total: int | None = Field(default=None, ge=0)


class PullProgressEvent(BaseModel):
    model_id: str
    status: str
    completed: int | None = None
    total: int | None = None
    percentage: float = 0.0

    @classmethod
    def from_tick(cls, model_id: str, tick: PullProgressTick) -> "PullProgressEvent":
        # Not clamped: completed > total yields > 100
        if tick.completed is not None and tick.total:
            pct = 100 * tick.completed / tick.total
        else:
            pct = 0.0
        return cls(
            model_id=model_id,
            status=tick.status,
            completed=tick.completed,
            total=tick.total,
            percentage=pct,
        )


class PullStatus(BaseModel):
    state: str  # idle | pulling | complete | error
    model_id: str
    last_event: PullProgressEvent | None = None
    error: str | None = None


class SystemInfo(BaseModel):
    total_ram_gb: float
    available_ram_gb: float
    cpu_cores: int
    os: str


class AiModelInfo(BaseModel):
    id: str
    size_mb: int
    speed: str
    quality: str
    notes: str


# --- Request / response bodies ---


class FeatureToggles(BaseModel):
    """Feature flags as sent by the host; omitted toggles are off."""

    punctuation_and_capitalization: bool = False
    remove_filler_words: bool = False
    normalize_numbers: bool = False
    fix_spelling: bool = False

    def to_flags(self) -> FeatureFlags:
        return FeatureFlags(**self.model_dump())


class EnhanceRequest(BaseModel):
    text: str
    model_id: str
    features: FeatureToggles = Field(default_factory=FeatureToggles)


class EnhanceResponse(BaseModel):
    text: str


class PullRequest(BaseModel):
    model_id: str
