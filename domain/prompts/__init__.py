"""Prompt templates for outreach message generation."""

from .outreach_prompts import (  # noqa: F401
    RECRUITER_SYSTEM_PROMPT,
    SALES_SYSTEM_PROMPT,
    build_system_prompt,
    format_candidate_profile,
)

__all__ = [
    "RECRUITER_SYSTEM_PROMPT",
    "SALES_SYSTEM_PROMPT",
    "build_system_prompt",
    "format_candidate_profile",
]
