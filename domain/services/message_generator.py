from __future__ import annotations

import re

from domain.models import CandidateInfo, GeneratedMessage, OutreachMode, SenderProfile
from domain.ports import LLMClientPort, LoggerPort
from domain.prompts import build_system_prompt, format_candidate_profile

_SUBJECT_PATTERN = re.compile(
    r"A\)\s*(?:SUBJECT LINE OPTION 1[^:\n]*[:\n]\s*)?(.+)",
    re.IGNORECASE,
)
_BODY_PATTERN = re.compile(
    r"C\)\s*(?:INMAIL BODY[^:\n]*[:\n]\s*)?([\s\S]+)",
    re.IGNORECASE,
)


def parse_recruiter_response(content: str) -> GeneratedMessage:
    """Split labelled ``A) / B) / C)`` output into subject and body.

    Missing labels degrade gracefully: no ``A)`` means an empty subject,
    no ``C)`` means the whole response is the body.
    """
    subject = ""
    body = content.strip()

    subject_match = _SUBJECT_PATTERN.search(content)
    if subject_match:
        subject = subject_match.group(1).strip().strip('"')

    body_match = _BODY_PATTERN.search(content)
    if body_match:
        body = body_match.group(1).strip()

    return GeneratedMessage(subject=subject, body=body)


class MessageGenerator:
    """Generates outreach text for a candidate through an LLM."""

    def __init__(
        self,
        *,
        llm: LLMClientPort,
        logger: LoggerPort,
        sender: SenderProfile | None = None,
        temperature: float = 0.7,
        max_tokens: int = 600,
    ) -> None:
        self._llm = llm
        self._logger = logger
        self._sender = sender or SenderProfile()
        self._temperature = temperature
        self._max_tokens = max_tokens

    async def generate(
        self,
        candidate: CandidateInfo,
        mode: OutreachMode,
    ) -> GeneratedMessage:
        self._logger.info("generating_message", candidate=candidate.name, mode=mode.value)
        content = await self._llm.complete(
            format_candidate_profile(candidate),
            system=build_system_prompt(mode, candidate, self._sender),
            max_tokens=self._max_tokens,
            temperature=self._temperature,
        )
        content = content or ""
        if mode is OutreachMode.RECRUITER:
            return parse_recruiter_response(content)
        return GeneratedMessage(subject="", body=content.strip())
