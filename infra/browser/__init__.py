from .candidate_extractor import CandidateExtractor
from .compose_pipeline import ComposePipeline
from .dom_inspector import inspect_dom
from .list_loader import ListLoader
from .playwright_session import PlaywrightSessionController
from .recruiter_ui import PlaywrightRecruiterUi
from .selectors import SELECTORS, SelectorResolver

__all__ = [
    "PlaywrightSessionController",
    "PlaywrightRecruiterUi",
    "SelectorResolver",
    "SELECTORS",
    "ListLoader",
    "CandidateExtractor",
    "ComposePipeline",
    "inspect_dom",
]
