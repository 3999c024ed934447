"""Unit tests for PlaywrightRecruiterUi wiring over the fake DOM."""
from __future__ import annotations

import asyncio

from infra.browser import (
    CandidateExtractor,
    ComposePipeline,
    ListLoader,
    PlaywrightRecruiterUi,
    PlaywrightSessionController,
    SelectorResolver,
)
from test.mocks import (
    PROJECT_URL,
    FakeElement,
    FakePage,
    InMemoryEventSink,
    InMemoryLogger,
    no_sleep,
    playwright_error,
)

CARDS = "div.row__top-card"
UNCONTACTED = '[data-test-pipeline-stage="UNCONTACTED"]'


def _ui(page: FakePage) -> PlaywrightRecruiterUi:
    logger = InMemoryLogger()
    session = PlaywrightSessionController(
        user_data_dir="browser-data",
        events=InMemoryEventSink(),
        logger=logger,
        sleep=no_sleep,
    )
    session.attach(page)
    resolver = SelectorResolver(logger=logger)
    return PlaywrightRecruiterUi(
        session=session,
        resolver=resolver,
        loader=ListLoader(resolver=resolver, logger=logger, sleep=no_sleep),
        extractor=CandidateExtractor(resolver=resolver, logger=logger),
        composer=ComposePipeline(session=session, resolver=resolver, logger=logger, sleep=no_sleep),
        logger=logger,
        sleep=no_sleep,
    )


def test_apply_uncontacted_filter() -> None:
    tab = FakeElement(tag="button")
    ui = _ui(FakePage(children={UNCONTACTED: [tab]}))

    assert asyncio.run(ui.apply_uncontacted_filter()) is True
    assert tab.clicks == 1
    assert asyncio.run(_ui(FakePage()).apply_uncontacted_filter()) is False


def test_load_candidates_returns_items_and_indicator() -> None:
    cards = [FakeElement(), FakeElement()]
    page = FakePage(children={
        CARDS: cards,
        '[class*="results-context"]': [FakeElement(text="1 - 2 of 2")],
    })

    listing = asyncio.run(_ui(page).load_candidates())

    assert list(listing.items) == cards
    assert listing.indicator == "1 - 2 of 2"


def test_go_to_next_page() -> None:
    button = FakeElement(tag="button")
    page = FakePage(children={'button:has-text("Next")': [button]})

    assert asyncio.run(_ui(page).go_to_next_page()) is True
    assert button.clicks == 1
    assert asyncio.run(_ui(FakePage()).go_to_next_page()) is False


def test_reset_to_list_navigates_filters_and_reloads() -> None:
    tab = FakeElement(tag="button")
    page = FakePage(children={UNCONTACTED: [tab], CARDS: [FakeElement()]})

    listing = asyncio.run(_ui(page).reset_to_list(PROJECT_URL))

    assert len(listing) == 1
    assert page.goto_calls == [PROJECT_URL]
    assert page.keyboard.pressed.count("Escape") == 3
    assert tab.clicks == 1


def test_open_composer_for_profile_visits_profile_first() -> None:
    page = FakePage(children={'input[name="subject"]': [FakeElement(tag="input")]})
    page.message_button = FakeElement(tag="button", text="Message Ada Lovelace")
    ui = _ui(page)

    asyncio.run(ui.open_composer_for_profile("https://www.linkedin.com/in/ada", "Ada Lovelace"))

    assert page.goto_calls == ["https://www.linkedin.com/in/ada"]
    assert page.message_button.clicks == 1


def test_connection_state_follows_session() -> None:
    ui = _ui(FakePage())

    assert ui.is_connected
    assert asyncio.run(ui.take_screenshot()) == b"PNG_FAKE"
    asyncio.run(ui.close())
    assert not ui.is_connected


def test_failed_next_click_reports_no_next_page() -> None:
    button = FakeElement(tag="button", click_error=playwright_error("Element is not attached to the DOM"))
    page = FakePage(children={'button:has-text("Next")': [button]})

    assert asyncio.run(_ui(page).go_to_next_page()) is False
