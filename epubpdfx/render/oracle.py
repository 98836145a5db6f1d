"""Client for the headless browser that turns markup into PDF fragments.

One :class:`PlaywrightRenderSession` owns one Chromium process for a whole
conversion run. Every content unit gets a fresh page, which is always
closed again even when rendering fails.
"""

from __future__ import annotations

import logging
from io import BytesIO
from types import TracebackType
from typing import Any, Callable, Protocol, runtime_checkable

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError
from playwright.sync_api import sync_playwright
from pypdf import PdfReader
from pypdf.errors import PyPdfError

from ..config import ConversionOptions
from ..exceptions import FragmentDecodeError, RenderCrashError, RenderTimeoutError
from ..styles import wrap_document
from ..types import RenderedFragment

__all__ = [
    "RenderSession",
    "SessionFactory",
    "PlaywrightRenderSession",
    "fragment_from_pdf",
]

LOGGER = logging.getLogger("epubpdfx.render")


def fragment_from_pdf(data: bytes) -> RenderedFragment:
    """Wrap PDF bytes into a :class:`RenderedFragment`, counting its pages."""

    try:
        reader = PdfReader(BytesIO(data))
        page_count = len(reader.pages)
    except (PyPdfError, ValueError, OSError) as exc:
        raise FragmentDecodeError("Rendered fragment is not a readable PDF") from exc
    return RenderedFragment(data=bytes(data), page_count=page_count)


@runtime_checkable
class RenderSession(Protocol):
    """Contract every render oracle implementation honours."""

    def __enter__(self) -> "RenderSession":
        ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        ...

    def render_to_fragment(self, markup: str, *, title: str | None = None) -> RenderedFragment:
        ...

    def restart(self) -> None:
        ...

    def close(self) -> None:
        ...


SessionFactory = Callable[[ConversionOptions], RenderSession]


class PlaywrightRenderSession:
    """Render oracle backed by headless Chromium through Playwright."""

    def __init__(self, options: ConversionOptions | None = None) -> None:
        self.options = options or ConversionOptions()
        self._playwright: Any = None
        self._browser: Any = None

    def __enter__(self) -> "PlaywrightRenderSession":
        self.start()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()

    @property
    def is_running(self) -> bool:
        return self._browser is not None and self._browser.is_connected()

    def start(self) -> None:
        if self.is_running:
            return
        LOGGER.debug("Launching headless Chromium with %s", list(self.options.browser_args))
        try:
            self._playwright = sync_playwright().start()
            self._browser = self._playwright.chromium.launch(
                headless=True,
                args=list(self.options.browser_args),
            )
        except PlaywrightError as exc:
            LOGGER.error("Failed to launch rendering engine: %s", exc)
            self.close()
            raise RenderCrashError(f"Unable to launch rendering engine: {exc}") from exc

    def restart(self) -> None:
        LOGGER.info("Restarting rendering engine")
        self.close()
        self.start()

    def close(self) -> None:
        browser, self._browser = self._browser, None
        playwright, self._playwright = self._playwright, None
        if browser is not None:
            try:
                browser.close()
            except PlaywrightError as exc:
                LOGGER.warning("Error while closing browser: %s", exc)
        if playwright is not None:
            try:
                playwright.stop()
            except PlaywrightError as exc:
                LOGGER.warning("Error while stopping Playwright: %s", exc)

    def render_to_fragment(self, markup: str, *, title: str | None = None) -> RenderedFragment:
        """Render ``markup`` inside the house-styled shell and return the PDF.

        Raises:
            RenderTimeoutError: If the page does not settle in time.
            RenderCrashError: If the browser is gone or fails mid-render.
            FragmentDecodeError: If the engine returns unreadable bytes.
        """

        if not self.is_running:
            raise RenderCrashError("Rendering engine is not running")

        document = wrap_document(
            markup, self.options.stylesheet, title=title, page_style=self.options.page_style
        )
        timeout_ms = self.options.render_timeout_ms
        try:
            page = self._browser.new_page()
        except PlaywrightError as exc:
            raise RenderCrashError(f"Unable to open a rendering page: {exc}") from exc

        try:
            page.set_default_timeout(timeout_ms)
            page.set_content(document, wait_until="networkidle", timeout=timeout_ms)
            data = page.pdf(
                format=self.options.page_format,
                margin=self.options.margins.as_dict(),
                print_background=self.options.print_background,
                display_header_footer=False,
            )
        except PlaywrightTimeoutError as exc:
            raise RenderTimeoutError(
                f"Rendering did not finish within {self.options.render_timeout:g}s"
            ) from exc
        except PlaywrightError as exc:
            raise RenderCrashError(f"Rendering engine failed: {exc}") from exc
        finally:
            self._release(page)

        return fragment_from_pdf(data)

    @staticmethod
    def _release(page: Any) -> None:
        try:
            page.close()
        except PlaywrightError as exc:
            LOGGER.warning("Failed to close rendering page: %s", exc)
