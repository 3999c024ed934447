"""Diagnostic DOM probe for working out which locators still match.

Not used by the run loop. Run it (CLI ``inspect``) after a UI change to see
which roles resolve, what the candidate card container looks like now, and
which elements scroll.
"""

from __future__ import annotations

from typing import Any

from playwright.async_api import Error as PlaywrightError

from infra.browser.selectors import SELECTORS

_STRUCTURE_SCRIPT = """
() => {
  const report = {};
  const links = document.querySelectorAll('a[href*="/talent/profile/"]');
  report.profileLinkCount = links.length;

  if (links.length > 0) {
    const chain = [];
    let el = links[0].parentElement;
    for (let i = 0; i < 8 && el; i++) {
      const cls = el.className ? el.className.toString().substring(0, 120) : '';
      chain.push(`${el.tagName.toLowerCase()}.${cls}`);
      el = el.parentElement;
    }
    report.firstProfileLinkParentChain = chain;

    const card = links[0].closest('li, [class*="row"], [class*="card"], [class*="item"]');
    if (card) {
      report.cardContainer = `${card.tagName.toLowerCase()}.${card.className.toString().substring(0, 120)}`;
      const candidates = {};
      card.className.toString().split(/\\s+/).filter(c => c.length > 3).forEach(cls => {
        const count = document.querySelectorAll(`.${CSS.escape(cls)}`).length;
        if (count >= links.length) candidates[`.${cls}`] = count;
      });
      report.potentialCardSelectors = candidates;
    }
  }

  const scrollable = [];
  document.querySelectorAll('main, [role="main"], [class*="pipeline"], [class*="scaffold"], [class*="manage"]').forEach(el => {
    if (el.scrollHeight > el.clientHeight + 100) {
      scrollable.push({
        tag: el.tagName,
        class: el.className.toString().substring(0, 100),
        scrollHeight: el.scrollHeight,
        clientHeight: el.clientHeight,
      });
    }
  });
  report.scrollableContainers = scrollable;
  return report;
}
"""


async def inspect_dom(page: Any, selectors: dict[str, list[str]] | None = None) -> dict[str, Any]:
    """Count matches for every locator of every role, plus a structural summary."""
    counts: dict[str, dict[str, int | str]] = {}
    for role, locators in (selectors or SELECTORS).items():
        role_counts: dict[str, int | str] = {}
        for locator in locators:
            try:
                role_counts[locator] = len(await page.query_selector_all(locator))
            except PlaywrightError as exc:
                role_counts[locator] = f"error: {exc}"
        counts[role] = role_counts

    try:
        structure = await page.evaluate(_STRUCTURE_SCRIPT)
    except PlaywrightError as exc:
        structure = {"error": str(exc)}

    return {"url": page.url, "roles": counts, "structure": structure}
