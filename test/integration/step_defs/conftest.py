"""Shared fixtures and context for BDD step definitions."""
from __future__ import annotations

from dataclasses import dataclass, field

import pytest

from domain.models import RunRecord
from test.mocks import Engine, FakeRecruiterUi, build_engine


@dataclass
class OutreachContext:
    """Holds mutable state shared across BDD steps."""

    ui: FakeRecruiterUi = field(default_factory=FakeRecruiterUi)
    engine: Engine | None = None
    run: RunRecord | None = None

    def get_engine(self) -> Engine:
        if self.engine is None:
            self.engine = build_engine(self.ui)
        return self.engine


@pytest.fixture()
def ctx() -> OutreachContext:
    return OutreachContext()


def split_names(names: str) -> list[str]:
    return [name.strip() for name in names.split(",") if name.strip()]
