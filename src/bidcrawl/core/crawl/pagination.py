"""
Pagination driver for stateful listing grids.

Triggers the grid's next-page control and waits until the visible page
observably changes. Different widgets reveal completion differently, so a
change in the first row's id, the first row's text, or the page-number
field each counts as an advance.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import TYPE_CHECKING

from ..backends.base import BrowserError
from ..extract.base import PageSignature
from .errors import PaginationStalled

if TYPE_CHECKING:
    from ..backends.base import DocumentSession
    from ..config.models import PaginationConfig
    from ..extract.grid import GridReader


logger = logging.getLogger(__name__)


class PaginationState(str, Enum):
    """Driver states."""

    STABLE = "stable"
    AWAITING = "awaiting"


class PaginationDriver:
    """Advances a stateful grid one page at a time."""

    def __init__(self, reader: GridReader, config: PaginationConfig):
        self.reader = reader
        self.config = config
        self.state = PaginationState.STABLE

    async def current_signature(self, session: DocumentSession) -> PageSignature:
        """Signature of the page as currently displayed."""
        snapshot = await self.reader.read(session)
        return snapshot.signature

    async def advance(self, session: DocumentSession) -> bool:
        """Move to the next page.

        Returns:
            True once the page changed, False when there is no usable
            next control (absent, disabled, or not clickable)

        Raises:
            PaginationStalled: If the page did not change within the timeout
        """
        snapshot = await self.reader.read(session)
        control = snapshot.next_control

        if control is None:
            logger.debug("No next-page control found")
            return False
        if control.disabled:
            logger.debug(f"Next-page control {control.selector} is disabled")
            return False

        before = snapshot.signature

        try:
            await session.click(control.selector)
        except BrowserError as e:
            logger.debug(f"Next-page click failed: {e}")
            return False

        self.state = PaginationState.AWAITING
        timeout_ms = self.config.advance_timeout_ms
        try:
            await asyncio.wait_for(self._await_change(session, before), timeout_ms / 1000)
        except asyncio.TimeoutError:
            raise PaginationStalled(before, timeout_ms) from None
        finally:
            self.state = PaginationState.STABLE

        return True

    async def _await_change(self, session: DocumentSession, before: PageSignature) -> None:
        interval = self.config.poll_interval_ms / 1000
        while True:
            try:
                now = await self.current_signature(session)
            except BrowserError as e:
                # The grid may be mid-render
                logger.debug(f"Signature read failed while waiting: {e}")
            else:
                if now.changed_from(before):
                    return
            await asyncio.sleep(interval)
