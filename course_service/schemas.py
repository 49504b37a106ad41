from pydantic import BaseModel, ConfigDict, Field


class PriceTierIn(BaseModel):
    usd: float = Field(default=0, ge=0)
    inr: float = Field(default=0, ge=0)


class PricingIn(BaseModel):
    weeks: int | None = Field(default=None, ge=0)
    lms: PriceTierIn = Field(default_factory=PriceTierIn)
    lms_video: PriceTierIn = Field(default_factory=PriceTierIn)
    lms_video_live: PriceTierIn = Field(default_factory=PriceTierIn)


class CourseIn(BaseModel):
    # detail pages carry free-form sections (syllabus, faqs, ...), keep them
    model_config = ConfigDict(extra="allow")

    id: str = Field(min_length=1)
    title: str = ""
    description: str = ""
    level: str = ""
    duration: str = ""
    track: str = ""
    domain: str = ""
    category: str | None = None
    tool: str | list[str] = ""
    status: str = ""
    rating: float | None = Field(default=None, ge=0, le=5)
    students: int = Field(default=0, ge=0)
    pricing: PricingIn | None = None
    enrollmentUrl: str = ""
    mainPageUrl: str = ""


class PreviewIn(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str | None = None
    title: str | None = None


class CourseSummaryOut(BaseModel):
    id: str | None
    title: str | None


class GenerateOut(BaseModel):
    success: bool
    path: str


class BackupOut(BaseModel):
    name: str
    path: str
    mtime: float


class RestoreIn(BaseModel):
    name: str = Field(min_length=1)
