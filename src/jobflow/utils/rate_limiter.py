"""Throttled opening of job links.

Opening many job postings at once gets the user flagged by job boards, so
links are opened one at a time with a fixed spacing.
"""

import webbrowser
from typing import Callable, Iterable

from aiolimiter import AsyncLimiter

from jobflow.utils.logger import get_logger


class TabOpener:
    """Opens URLs in the browser through an aiolimiter AsyncLimiter.

    The limiter's capacity is one link per ``interval`` seconds; the first
    link opens immediately.
    """

    def __init__(
        self,
        interval: float = 1.0,
        open_url: Callable[[str], object] = webbrowser.open_new_tab,
    ):
        """Initialize the tab opener.

        Args:
            interval: Seconds between two opened links (default: 1 second)
            open_url: Function that opens one URL (injectable for tests)
        """
        self.limiter = AsyncLimiter(max_rate=1, time_period=interval)
        self.open_url = open_url
        self.logger = get_logger(view="links", component="tab_opener")

    async def open_all(self, urls: Iterable[str]) -> int:
        """Open every URL, waiting for the limiter between links.

        Returns:
            Number of URLs opened
        """
        opened = 0
        for url in urls:
            await self.limiter.acquire()
            self.open_url(url)
            opened += 1
            self.logger.debug("Opened link", url=url)
        return opened
