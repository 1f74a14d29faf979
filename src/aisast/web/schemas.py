"""Request bodies for the web API (camelCase on the wire)."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from aisast.scanner.models import Severity


class _Body(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class ScanRequest(_Body):
    code: str
    file_name: str = Field(default="", alias="fileName")
    language: str
    enrich: bool = True
    analyze_file: bool = Field(default=False, alias="analyzeFile")


class FindingSummary(_Body):
    """A finding as the client last saw it."""

    id: str | None = None
    rule_id: str | None = Field(default=None, alias="ruleId")
    type: str
    severity: Severity = Severity.MEDIUM
    line: int = Field(ge=1)
    description: str = ""
    message: str = ""
    confidence: int = Field(default=70, ge=0, le=100)
    suggested_fix: str | None = Field(default=None, alias="suggestedFix")
    explanation: str | None = None

    @field_validator("severity", mode="before")
    @classmethod
    def _lower_severity(cls, value):
        if isinstance(value, str):
            value = value.lower()
            if value not in {s.value for s in Severity}:
                return Severity.MEDIUM
        return value


class FixRequest(_Body):
    vulnerability: FindingSummary
    code: str
    file_name: str = Field(default="", alias="fileName")
    language: str
    session_id: str | None = Field(default=None, alias="sessionId")


class FixAllRequest(_Body):
    code: str
    file_name: str = Field(default="", alias="fileName")
    language: str
    session_id: str | None = Field(default=None, alias="sessionId")


class SonarAnalyzeRequest(_Body):
    code: str
    file_name: str = Field(default="", alias="fileName")
    language: str
    component: str | None = None
