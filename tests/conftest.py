from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
import sys

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
TESTS_ROOT = Path(__file__).resolve().parent
for _path in (PROJECT_ROOT, TESTS_ROOT):
    if str(_path) not in sys.path:
        sys.path.insert(0, str(_path))

from epubpdfx.config import ConversionOptions  # noqa: E402
from epubpdfx.exceptions import RenderCrashError, RenderTimeoutError  # noqa: E402
from epubpdfx.render.oracle import fragment_from_pdf  # noqa: E402
from epubpdfx.types import RenderedFragment  # noqa: E402

from builders import build_epub, chapter_html, make_pdf  # noqa: E402


@dataclass
class FakeRenderSession:
    """Render oracle stand-in.

    Every ``<section`` in the markup becomes one page (at least one page
    per unit). ``RENDER_TIMEOUT`` and ``RENDER_CRASH`` markers trigger the
    matching failures.
    """

    options: ConversionOptions
    rendered: list[str] = field(default_factory=list)
    titles: list[str | None] = field(default_factory=list)
    restarts: int = 0
    started: bool = False
    closed: bool = False

    def __enter__(self) -> "FakeRenderSession":
        self.started = True
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def render_to_fragment(self, markup: str, *, title: str | None = None) -> RenderedFragment:
        if "RENDER_TIMEOUT" in markup:
            raise RenderTimeoutError("Rendering did not finish within 30s")
        if "RENDER_CRASH" in markup:
            raise RenderCrashError("Rendering engine failed: Target closed")
        self.rendered.append(markup)
        self.titles.append(title)
        return fragment_from_pdf(make_pdf(max(1, markup.count("<section"))))

    def restart(self) -> None:
        self.restarts += 1

    def close(self) -> None:
        self.closed = True


class FakeSessionFactory:
    def __init__(self) -> None:
        self.sessions: list[FakeRenderSession] = []

    def __call__(self, options: ConversionOptions) -> FakeRenderSession:
        session = FakeRenderSession(options)
        self.sessions.append(session)
        return session

    @property
    def session(self) -> FakeRenderSession:
        return self.sessions[-1]


@pytest.fixture()
def session_factory() -> FakeSessionFactory:
    return FakeSessionFactory()


@pytest.fixture()
def three_unit_epub() -> bytes:
    return build_epub(
        [
            ("ch1", "text/ch1.xhtml", chapter_html("<h1>Beginning</h1><section>a</section><section>b</section>")),
            ("ch2", "text/ch2.xhtml", chapter_html("   ")),
            ("ch3", "text/ch3.xhtml", chapter_html("<h2>Ending</h2><p>The end.</p>")),
        ]
    )


@pytest.fixture()
def epub_path(tmp_path: Path, three_unit_epub: bytes) -> Path:
    path = tmp_path / "book.epub"
    path.write_bytes(three_unit_epub)
    return path
