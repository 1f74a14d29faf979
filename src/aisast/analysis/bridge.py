"""Analysis bridge — concurrent, deadline-bounded enrichment of findings."""

from __future__ import annotations

import asyncio
import json
import logging
import re
from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from aisast.analysis.prompts import (
    ANALYSIS_SYSTEM,
    FILE_SYSTEM,
    FIX_SYSTEM,
    file_prompt,
    finding_prompt,
    fix_prompt,
)
from aisast.analysis.providers import CompletionProvider
from aisast.config import LLMConfig
from aisast.errors import CompletionError
from aisast.scanner.catalog import normalize_language
from aisast.scanner.engine import split_lines
from aisast.scanner.models import EnrichmentSummary, Finding, FindingStatus, Severity

logger = logging.getLogger(__name__)

CONTEXT_RADIUS = 3

_FENCE = re.compile(r"```[a-zA-Z0-9_-]*")


class EnrichmentPayload(BaseModel):
    """Reply schema for the per-finding analysis prompt."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    confidence: int = Field(ge=0, le=100)
    suggested_fix: str | None = Field(default=None, alias="suggestedFix")
    explanation: str | None = None


class FixSuggestionPayload(BaseModel):
    """Reply schema for the fix prompt."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    fixed_line: str = Field(alias="fixedLine", min_length=1)
    explanation: str | None = None
    confidence: int | None = Field(default=None, ge=0, le=100)


class AIFindingPayload(BaseModel):
    """One entry of the whole-file reply array."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    line: int = Field(ge=1)
    type: str = Field(min_length=1)
    severity: Severity = Severity.MEDIUM
    description: str = ""
    confidence: int = Field(default=70, ge=0, le=100)
    suggested_fix: str | None = Field(default=None, alias="suggestedFix")

    @field_validator("severity", mode="before")
    @classmethod
    def _lower_severity(cls, value):
        return value.lower() if isinstance(value, str) else value


@dataclass
class EnrichmentResult:
    """A successful enrichment reply."""

    confidence: int
    suggested_fix: str | None = None
    explanation: str | None = None


@dataclass
class EnrichmentFailure:
    """Enrichment did not produce a usable reply."""

    reason: str
    timed_out: bool = False


def code_context(lines: list[str], line: int, radius: int = CONTEXT_RADIUS) -> str:
    """Lines ``line - radius`` through ``line + radius``, clipped to the buffer."""
    start = max(0, line - 1 - radius)
    end = min(len(lines), line + radius)
    return "\n".join(lines[start:end])


def extract_json(reply: str, opening: str = "{"):
    """Decode the first JSON value starting with ``opening`` in a model reply.

    Markdown code fences and surrounding prose are ignored.
    """
    text = _FENCE.sub("", reply)
    start = text.find(opening)
    if start < 0:
        raise ValueError("no JSON value in reply")
    value, _ = json.JSONDecoder().raw_decode(text[start:])
    return value


def parse_enrichment(reply: str) -> EnrichmentPayload:
    """Parse and validate an analysis reply. Raises ValueError."""
    data = extract_json(reply)
    try:
        return EnrichmentPayload.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"invalid analysis reply: {e.error_count()} error(s)") from e


def _slug(text: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-") or "issue"


class AnalysisBridge:
    """Adds explanation, suggested fix and confidence to scanner findings.

    Every provider call is bounded by ``config.timeout``; a whole
    ``enrich_all`` pass is bounded by ``config.deadline``. Failures are
    logged and recovered locally: findings keep their scanner defaults.
    """

    def __init__(
        self,
        provider: CompletionProvider | None,
        config: LLMConfig | None = None,
    ) -> None:
        self._provider = provider
        self._config = config or LLMConfig()

    @property
    def enabled(self) -> bool:
        return self._provider is not None

    @property
    def provider_name(self) -> str:
        if self._provider is None:
            return ""
        return getattr(self._provider, "name", type(self._provider).__name__)

    async def _complete(self, system: str, prompt: str) -> str:
        return await asyncio.wait_for(
            self._provider.complete(system, prompt),
            timeout=self._config.timeout,
        )

    async def enrich(
        self,
        finding: Finding,
        lines: list[str],
        language: str,
    ) -> EnrichmentResult | EnrichmentFailure:
        """Enrich one finding. Never raises."""
        if self._provider is None:
            return EnrichmentFailure("enrichment disabled")

        target = lines[finding.line - 1] if 0 < finding.line <= len(lines) else ""
        prompt = finding_prompt(
            finding, code_context(lines, finding.line), target, language
        )

        try:
            reply = await self._complete(ANALYSIS_SYSTEM, prompt)
        except asyncio.TimeoutError:
            logger.debug("Enrichment timed out for %s line %d", finding.rule_id, finding.line)
            return EnrichmentFailure("timeout", timed_out=True)
        except CompletionError as e:
            logger.warning("Enrichment failed for %s: %s", finding.rule_id, e)
            return EnrichmentFailure(str(e))
        except Exception as e:
            logger.warning(
                "Provider error while enriching %s: %s", finding.rule_id, e, exc_info=True
            )
            return EnrichmentFailure(f"provider error: {e}")

        try:
            payload = parse_enrichment(reply)
        except ValueError as e:
            logger.debug("Unusable enrichment reply for %s: %s", finding.rule_id, e)
            return EnrichmentFailure(f"unparseable reply: {e}")

        return EnrichmentResult(
            confidence=payload.confidence,
            suggested_fix=payload.suggested_fix,
            explanation=payload.explanation,
        )

    async def enrich_all(
        self,
        findings: list[Finding],
        text: str,
        language: str,
    ) -> EnrichmentSummary:
        """Enrich every finding concurrently within the scan deadline.

        Results are applied after all calls settle, so the order of
        ``findings`` never changes. Calls still pending at the deadline
        are cancelled and counted as timed out. If the caller cancels,
        findings are restored and the cancellation propagates.
        """
        summary = EnrichmentSummary(provider=self.provider_name)
        if self._provider is None or not findings:
            return summary

        lines = split_lines(text)
        semaphore = asyncio.Semaphore(max(1, self._config.max_concurrency))
        previous = [f.status for f in findings]

        async def _bounded(finding: Finding) -> EnrichmentResult | EnrichmentFailure:
            async with semaphore:
                return await self.enrich(finding, lines, language)

        for finding in findings:
            finding.status = FindingStatus.ANALYZING

        tasks = [asyncio.ensure_future(_bounded(f)) for f in findings]
        try:
            _, pending = await asyncio.wait(tasks, timeout=self._config.deadline)
        except asyncio.CancelledError:
            for task in tasks:
                task.cancel()
            for finding, status in zip(findings, previous):
                finding.status = status
            raise

        if pending:
            logger.warning(
                "Enrichment deadline of %.1fs reached; cancelling %d call(s)",
                self._config.deadline,
                len(pending),
            )
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)

        summary.attempted = len(findings)
        for finding, task in zip(findings, tasks):
            finding.status = FindingStatus.DETECTED
            if task in pending:
                summary.timed_out += 1
                continue

            outcome = task.result()
            if isinstance(outcome, EnrichmentResult):
                finding.confidence = outcome.confidence
                finding.suggested_fix = outcome.suggested_fix
                finding.explanation = outcome.explanation
                summary.succeeded += 1
            elif outcome.timed_out:
                summary.timed_out += 1
            else:
                summary.failed += 1

        logger.debug(
            "Enrichment: %d ok, %d failed, %d timed out",
            summary.succeeded,
            summary.failed,
            summary.timed_out,
        )
        return summary

    async def analyze_file(
        self,
        text: str,
        file_name: str,
        language: str,
    ) -> list[Finding]:
        """Ask the provider for findings the catalog does not cover."""
        if self._provider is None or not text:
            return []

        try:
            reply = await self._complete(FILE_SYSTEM, file_prompt(text, file_name, language))
            items = extract_json(reply, "[")
        except asyncio.TimeoutError:
            logger.debug("Whole-file analysis timed out for %s", file_name)
            return []
        except (CompletionError, ValueError) as e:
            logger.warning("Whole-file analysis failed for %s: %s", file_name, e)
            return []
        except Exception as e:
            logger.warning(
                "Provider error during whole-file analysis of %s: %s", file_name, e, exc_info=True
            )
            return []

        if not isinstance(items, list):
            return []

        lines = split_lines(text)
        lang = normalize_language(language)
        findings: list[Finding] = []
        for item in items:
            try:
                payload = AIFindingPayload.model_validate(item)
            except ValidationError:
                logger.debug("Dropping malformed AI finding: %r", item)
                continue
            if payload.line > len(lines):
                logger.debug("Dropping AI finding on line %d (out of range)", payload.line)
                continue
            findings.append(
                Finding(
                    rule_id=f"ai:{_slug(payload.type)}",
                    type=payload.type,
                    severity=payload.severity,
                    line=payload.line,
                    message=payload.description or payload.type,
                    confidence=payload.confidence,
                    source_line=lines[payload.line - 1],
                    language=lang,
                    file_name=file_name,
                    origin="ai",
                    suggested_fix=payload.suggested_fix,
                )
            )
        return findings

    async def suggest_fix(
        self,
        finding: Finding,
        text: str,
        language: str,
    ) -> str | None:
        """Request a single replacement line for a finding, or None."""
        if self._provider is None:
            return None

        lines = split_lines(text)
        target = lines[finding.line - 1] if 0 < finding.line <= len(lines) else ""
        prompt = fix_prompt(finding, code_context(lines, finding.line), target, language)

        try:
            reply = await self._complete(FIX_SYSTEM, prompt)
            payload = FixSuggestionPayload.model_validate(extract_json(reply))
        except asyncio.TimeoutError:
            logger.debug("Fix suggestion timed out for %s", finding.rule_id)
            return None
        except (CompletionError, ValueError) as e:
            # pydantic's ValidationError is a ValueError
            logger.warning("Fix suggestion failed for %s: %s", finding.rule_id, e)
            return None
        except Exception as e:
            logger.warning(
                "Provider error while suggesting a fix for %s: %s", finding.rule_id, e, exc_info=True
            )
            return None

        if payload.explanation and not finding.explanation:
            finding.explanation = payload.explanation
        return payload.fixed_line
