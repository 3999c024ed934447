from __future__ import annotations

from typing import Any

from domain.models import CandidateInfo
from domain.ports import LoggerPort
from infra.browser.selectors import SelectorResolver

DEFAULT_ORIGIN = "https://www.linkedin.com"


class CandidateExtractor:
    """Reads name, headline and profile URL out of one list item.

    Every field is looked up independently and falls back to its default,
    so a broken headline never costs us the name. ``extract`` never raises.
    """

    def __init__(
        self,
        *,
        resolver: SelectorResolver,
        logger: LoggerPort,
        origin: str = DEFAULT_ORIGIN,
    ) -> None:
        self._resolver = resolver
        self._logger = logger
        self._origin = origin.rstrip("/")

    async def extract(self, element: Any) -> CandidateInfo:
        name = await self._text(element, "candidateName") or "Unknown"
        headline = await self._text(element, "candidateHeadline")
        profile_url = await self._profile_url(element)
        self._logger.info(
            "candidate_extracted",
            name=name,
            headline=headline,
            profile_url=profile_url or None,
        )
        return CandidateInfo(name=name, headline=headline, profile_url=profile_url)

    async def _text(self, element: Any, role: str) -> str:
        try:
            found = await self._resolver.resolve(role, element, timeout_ms=0, require_visible=False)
            if found is None:
                return ""
            return (await found.inner_text()).strip()
        except Exception as exc:
            self._logger.warning("candidate_field_unreadable", role=role, error=str(exc))
            return ""

    async def _profile_url(self, element: Any) -> str:
        href = await self._href(element, "profileLinkPublic")
        if not href:
            href = await self._href(element, "candidateLink")
        return self.normalise_url(href)

    async def _href(self, element: Any, role: str) -> str:
        try:
            link = await self._resolver.resolve(role, element, timeout_ms=0, require_visible=False)
            if link is None:
                return ""
            return (await link.get_attribute("href") or "").strip()
        except Exception as exc:
            self._logger.warning("candidate_field_unreadable", role=role, error=str(exc))
            return ""

    def normalise_url(self, href: str) -> str:
        if not href or href.startswith("http"):
            return href
        if not href.startswith("/"):
            href = "/" + href
        return self._origin + href
