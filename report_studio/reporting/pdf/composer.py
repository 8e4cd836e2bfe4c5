"""
Page Composer.

Assembles a cover, a table of contents and titled content sections into
one PDF. Section start pages are recorded while the document is laid out,
so the table of contents is resolved in two passes:

1. Render cover + content and record each section's page.
2. Render the table of contents on its own to learn how many pages it
   takes (the offset).
3. Render cover + TOC + content with TOC entries at page + offset and
   check every section landed exactly there.

Layout splits and resizes flowables in place, so sections are registered
as builder callables and every pass lays out freshly built flowables.

"Page i of N" footers, bookmarks and outline entries are written when the
saved pages are replayed, from the first content page onward.
"""
from dataclasses import dataclass, field
from datetime import datetime
from functools import partial
from io import BytesIO
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Tuple
import logging

from reportlab.lib.units import mm
from reportlab.pdfgen import canvas as pdf_canvas
from reportlab.platypus import (
    CondPageBreak,
    Flowable,
    PageBreak,
    Paragraph,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)
from xml.sax.saxutils import escape

from report_studio.errors import ReportLayoutError

from .styles import COLORS, FONT_FAMILY, PDFConfig, create_styles

logger = logging.getLogger("CostReports.Composer")

TOC_TITLE = "Table of Contents"
FOOTER_FONT_SIZE = 7.5

FlowableBuilder = Callable[[], Sequence[Optional[Flowable]]]


@dataclass
class RenderedReport:
    """Final PDF plus the resolved table of contents."""
    pdf_bytes: bytes
    page_count: int
    toc_entries: List[Tuple[str, int]] = field(default_factory=list)
    toc_offset: int = 0

    @property
    def file_size(self) -> int:
        return len(self.pdf_bytes)


@dataclass
class _Section:
    title: str
    key: str
    build: FlowableBuilder
    new_page: bool = True


# ============================================================================
# FLOWABLES & CANVAS
# ============================================================================

class SectionMarker(Flowable):
    """Zero-size flowable that records the page it is drawn on.

    The canvas turns the mark into a PDF bookmark and outline entry.
    """

    def __init__(self, key: str, title: str, pages: Dict[str, int]):
        super().__init__()
        self.key = key
        self.title = title
        self._pages = pages
        self.width = 0
        self.height = 0

    def wrap(self, availWidth, availHeight):
        return 0, 0

    def draw(self):
        self._pages[self.key] = self.canv.getPageNumber()
        self.canv.mark_section(self.key, self.title)


class NumberedCanvas(pdf_canvas.Canvas):
    """Canvas that defers footers until the total page count is known.

    Pages are only emitted in ``save()``, so bookmarks are replayed there
    too; the document's page reference is correct only while its page is
    being written.
    """

    def __init__(self, *args, first_numbered_page: int = 1, footer_text: str = "",
                 stats: Optional[Dict[str, int]] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self._saved_page_states = []
        self._page_sections: List[Tuple[str, str]] = []
        self._first_numbered_page = first_numbered_page
        self._footer_text = footer_text
        self._stats = stats if stats is not None else {}

    def mark_section(self, key: str, title: str) -> None:
        self._page_sections.append((key, title))

    def showPage(self):
        self._saved_page_states.append(dict(self.__dict__))
        self._page_sections = []
        self._startPage()

    def save(self):
        total = len(self._saved_page_states)
        self._stats["page_count"] = total
        for state in self._saved_page_states:
            self.__dict__.update(state)
            for key, title in self._page_sections:
                self.bookmarkPage(key)
                self.addOutlineEntry(title, key, level=0)
            if self._pageNumber >= self._first_numbered_page:
                self._draw_footer(total)
            super().showPage()
        super().save()

    def _draw_footer(self, total_pages: int):
        width, _ = self._pagesize
        self.saveState()
        self.setStrokeColor(COLORS["border"])
        self.setLineWidth(0.5)
        self.line(15 * mm, 14 * mm, width - 15 * mm, 14 * mm)
        self.setFont(FONT_FAMILY, FOOTER_FONT_SIZE)
        self.setFillColor(COLORS["text_light"])
        if self._footer_text:
            self.drawString(15 * mm, 10 * mm, self._footer_text)
        self.drawRightString(width - 15 * mm, 10 * mm, f"Page {self._pageNumber} of {total_pages}")
        self.restoreState()


# ============================================================================
# COMPOSER
# ============================================================================

class ReportComposer:
    """Collects cover and section builders, then renders them with a resolved TOC.

    Builders are called once per layout pass and must return new flowables
    each time.

    Usage:
        composer = ReportComposer(config)
        composer.add_cover(lambda: build_cover(report, styles))
        composer.add_section("Executive Summary", partial(build_summary, totals, styles))
        rendered = composer.render()
    """

    def __init__(self, config: Optional[PDFConfig] = None, footer_text: str = "",
                 keep_with_heading: float = 60 * mm):
        self.config = config or PDFConfig()
        self.footer_text = footer_text
        self.keep_with_heading = keep_with_heading
        self.styles = create_styles()
        self._cover: Optional[FlowableBuilder] = None
        self._sections: List[_Section] = []
        self._pages: Dict[str, int] = {}

    # --- composition ------------------------------------------------------

    def add_cover(self, build: FlowableBuilder) -> None:
        self._cover = build

    def add_section(self, title: str, build: FlowableBuilder, new_page: bool = True) -> None:
        """Register a TOC-listed section built by ``build``."""
        key = f"section-{len(self._sections) + 1}"
        self._sections.append(_Section(title=title, key=key, build=build, new_page=new_page))

    @property
    def section_titles(self) -> List[str]:
        return [section.title for section in self._sections]

    @property
    def has_cover(self) -> bool:
        return self._cover is not None

    # --- story assembly ---------------------------------------------------

    @staticmethod
    def _built(build: FlowableBuilder) -> List[Flowable]:
        return [f for f in build() if f is not None]

    def _content_story(self) -> List[Flowable]:
        story: List[Flowable] = []
        for index, section in enumerate(self._sections):
            if index and section.new_page:
                story.append(PageBreak())
            elif index:
                story.append(CondPageBreak(self.keep_with_heading))
            story.append(SectionMarker(section.key, section.title, self._pages))
            story.extend(self._built(section.build))
        return story

    def _toc_story(self, entries: Sequence[Tuple[str, str, int]], linked: bool) -> List[Flowable]:
        """TOC page(s): title, then one row per section with its page."""
        styles = self.styles
        rows = []
        for key, title, page in entries:
            label = escape(title)
            if linked:
                label = f'<a href="#{key}">{label}</a>'
            rows.append([
                Paragraph(label, styles["toc_entry"]),
                Paragraph(str(page), styles["toc_page"]),
            ])

        story: List[Flowable] = [Paragraph(TOC_TITLE, styles["title"]), Spacer(1, 4 * mm)]
        if rows:
            width = self.config.content_width
            table = Table(rows, colWidths=[width - 25 * mm, 25 * mm])
            table.setStyle(TableStyle([
                ("LINEBELOW", (0, 0), (-1, -1), 0.25, COLORS["border"]),
                ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
                ("TOPPADDING", (0, 0), (-1, -1), 3),
                ("BOTTOMPADDING", (0, 0), (-1, -1), 3),
            ]))
            story.append(table)
        return story

    def _document_story(self, toc: Optional[List[Flowable]] = None) -> List[Flowable]:
        cover = self._built(self._cover) if self._cover else []
        parts = [part for part in (cover, toc, self._content_story()) if part]
        story: List[Flowable] = []
        for index, part in enumerate(parts):
            if index:
                story.append(PageBreak())
            story.extend(part)
        return story

    # --- rendering --------------------------------------------------------

    def _build(self, story: List[Flowable], first_numbered_page: int) -> Tuple[bytes, int]:
        buffer = BytesIO()
        stats: Dict[str, int] = {}
        doc = SimpleDocTemplate(
            buffer,
            pagesize=self.config.page_size,
            leftMargin=self.config.margin,
            rightMargin=self.config.margin,
            topMargin=self.config.margin,
            bottomMargin=max(self.config.margin, 20 * mm),
            title=self.config.title,
            author=self.config.author,
            creator="Cost Report Studio",
        )
        canvasmaker = partial(
            NumberedCanvas,
            first_numbered_page=first_numbered_page,
            footer_text=self.footer_text,
            stats=stats,
        )
        doc.build(story, canvasmaker=canvasmaker)
        pdf_bytes = buffer.getvalue()
        buffer.close()
        return pdf_bytes, stats.get("page_count", 0)

    def render(self, output_path: Optional[str] = None) -> RenderedReport:
        """Lay out the document, resolve the TOC and return the final PDF.

        Raises:
            ReportLayoutError: a section moved between the measuring pass
                and the final render.
        """
        if not self._sections and self._cover is None:
            raise ValueError("Nothing to render")

        cover_pages = 1 if self._cover else 0
        started = datetime.now()

        # Pass 1: cover + content, recording composition-time pages
        self._pages.clear()
        pdf_bytes, page_count = self._build(self._document_story(), cover_pages + 1)
        composed = dict(self._pages)

        if not self.config.sections.table_of_contents or not self._sections:
            entries = [(section.title, composed[section.key]) for section in self._sections]
            logger.info("Rendered %d pages without table of contents", page_count)
            self._write(pdf_bytes, output_path)
            return RenderedReport(pdf_bytes, page_count, entries, 0)

        # Offset = pages taken by the TOC itself
        placeholder = [(s.key, s.title, composed[s.key]) for s in self._sections]
        _, toc_pages = self._build(self._toc_story(placeholder, linked=False), first_numbered_page=10 ** 6)
        offset = toc_pages

        # Pass 2: cover + TOC + content, all rebuilt
        resolved = [(s.key, s.title, composed[s.key] + offset) for s in self._sections]
        self._pages.clear()
        pdf_bytes, page_count = self._build(
            self._document_story(self._toc_story(resolved, linked=True)),
            cover_pages + offset + 1,
        )

        for key, title, expected in resolved:
            actual = self._pages.get(key)
            if actual != expected:
                raise ReportLayoutError(
                    f"Section '{title}' rendered on page {actual}, table of contents says {expected}"
                )

        logger.info(
            "Rendered %d pages (%d TOC page(s), %d sections) in %.2fs",
            page_count, offset, len(resolved), (datetime.now() - started).total_seconds(),
        )
        self._write(pdf_bytes, output_path)
        return RenderedReport(
            pdf_bytes=pdf_bytes,
            page_count=page_count,
            toc_entries=[(title, page) for _, title, page in resolved],
            toc_offset=offset,
        )

    @staticmethod
    def _write(pdf_bytes: bytes, output_path: Optional[str]) -> None:
        if not output_path:
            return
        Path(output_path).parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "wb") as f:
            f.write(pdf_bytes)
        logger.info("PDF saved to: %s", output_path)
