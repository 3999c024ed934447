"""Application/UI layer package."""

from .facade import OutreachFacade

__all__ = ["OutreachFacade"]
