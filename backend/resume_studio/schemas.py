from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import List, Optional


class CamelModel(BaseModel):
    # Stored JSON and API payloads use the camelCase keys of the browser store
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class WorkExperience(CamelModel):
    id: str
    company: str = ""
    role: str = ""
    start_date: str = ""
    end_date: str = ""
    current: bool = False
    description: str = ""  # free text / bullet lines


class Education(CamelModel):
    id: str
    institution: str = ""
    degree: str = ""
    start_date: str = ""
    end_date: str = ""
    description: Optional[str] = None


class ResumeProfile(CamelModel):
    id: str
    name: str = ""
    title: str = ""  # target job title
    email: str = ""
    phone: str = ""
    location: str = ""
    summary: str = ""
    skills: List[str] = Field(default_factory=list)
    experience: List[WorkExperience] = Field(default_factory=list)
    education: List[Education] = Field(default_factory=list)
    last_modified: int = 0  # epoch milliseconds


class AISettings(CamelModel):
    provider: str = "gemini"
    api_key: str = ""
    base_url: str = ""
    model: str = "gemini-3-flash-preview"


class ProviderPreset(CamelModel):
    id: str
    default_base_url: str
    default_model: str


# ----- AI results (never persisted) -----

# Models answer with nulls for unknown fields, so everything here is optional
class ParsedExperience(CamelModel):
    company: Optional[str] = None
    role: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    current: Optional[bool] = None
    description: Optional[str] = None


class ParsedEducation(CamelModel):
    institution: Optional[str] = None
    degree: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None


class ParsedResume(CamelModel):
    name: Optional[str] = None
    title: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    summary: Optional[str] = None
    skills: Optional[List[str]] = None
    experience: Optional[List[ParsedExperience]] = None
    education: Optional[List[ParsedEducation]] = None

    @field_validator("skills", "experience", "education", mode="before")
    @classmethod
    def _drop_null_items(cls, v):
        return [item for item in v if item is not None] if isinstance(v, list) else v


class VaguePoint(CamelModel):
    experience_id: Optional[str] = None
    suggestion: str = ""

    @field_validator("suggestion", mode="before")
    @classmethod
    def _null_text(cls, v):
        return v if v is not None else ""


class OptimizationResult(CamelModel):
    score: int = 0  # 0-100
    missing_keywords: List[str] = Field(default_factory=list)
    vague_points: List[VaguePoint] = Field(default_factory=list)
    summary_suggestion: str = ""
    match_analysis: str = ""

    @field_validator("missing_keywords", "vague_points", mode="before")
    @classmethod
    def _null_list(cls, v):
        if v is None:
            return []
        return [item for item in v if item is not None] if isinstance(v, list) else v

    @field_validator("summary_suggestion", "match_analysis", mode="before")
    @classmethod
    def _null_text(cls, v):
        return v if v is not None else ""

    @field_validator("score", mode="before")
    @classmethod
    def _round_score(cls, v):
        if isinstance(v, float):
            return round(v)
        return v if v is not None else 0


# ----- Request bodies -----

class ParseTextRequest(CamelModel):
    text: str


class AnalyzeRequest(CamelModel):
    job_description: str


class InlineAnalyzeRequest(CamelModel):
    resume: ResumeProfile
    job_description: str


class RewriteBulletRequest(CamelModel):
    bullet: str
    job_description: Optional[str] = None


class RewriteResponse(CamelModel):
    variations: List[str]


class RewriteContext(CamelModel):
    job_description: Optional[str] = None
