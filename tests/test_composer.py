"""Tests for report_studio/reporting/pdf/composer.py — page layout and TOC resolution."""

import re
from functools import partial

import pytest
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, Table

from report_studio.reporting.pdf import PDFConfig, PDFSectionOptions, ReportComposer

FOOTER = re.compile(r"Page (\d+) of (\d+)")


def _paragraphs(text, style):
    return [Paragraph(text, style)]


def _composer(config=None, cover=True, sections=("Summary", "Details"), new_page=True):
    composer = ReportComposer(config or PDFConfig(), footer_text="Test Project")
    body = composer.styles["body"]
    if cover:
        composer.add_cover(partial(_paragraphs, "Cover", composer.styles["cover_title"]))
    for title in sections:
        composer.add_section(title, partial(_paragraphs, f"{title} content", body), new_page=new_page)
    return composer


def _long_table(rows=120):
    return [Table([[f"Row {i}", f"{i * 10:,}"] for i in range(rows)], colWidths=[80 * mm, 40 * mm], repeatRows=0)]


def _outline(reader):
    return [(item.title, reader.get_destination_page_number(item) + 1) for item in reader.outline]


# =========================================================================
# Composition
# =========================================================================

class TestComposition:
    def test_none_flowables_skipped(self):
        composer = ReportComposer()
        composer.add_section("Only", lambda: [None, Paragraph("kept", composer.styles["body"])])
        assert composer.render().page_count == 2

    def test_builders_called_each_pass(self):
        calls = []
        composer = _composer(sections=())

        def build():
            calls.append(1)
            return [Paragraph("Summary content", composer.styles["body"])]

        composer.add_section("Summary", build)
        composer.render()
        # composition pass and final pass
        assert len(calls) == 2

    def test_builder_without_toc_called_once(self):
        calls = []
        config = PDFConfig(sections=PDFSectionOptions(table_of_contents=False))
        composer = _composer(config, sections=())
        composer.add_section("Summary", lambda: calls.append(1) or [])
        composer.render()
        assert len(calls) == 1

    def test_nothing_to_render(self):
        with pytest.raises(ValueError):
            ReportComposer().render()

    def test_section_titles(self):
        composer = _composer()
        assert composer.section_titles == ["Summary", "Details"]
        assert composer.has_cover


# =========================================================================
# Table of contents
# =========================================================================

class TestTableOfContents:
    def test_entries_shifted_by_toc_pages(self):
        rendered = _composer().render()
        assert rendered.toc_offset == 1
        # cover, toc, summary, details
        assert rendered.toc_entries == [("Summary", 3), ("Details", 4)]
        assert rendered.page_count == 4

    def test_pdf_bytes(self):
        rendered = _composer().render()
        assert rendered.pdf_bytes.startswith(b"%PDF")
        assert rendered.file_size == len(rendered.pdf_bytes)

    def test_without_toc(self):
        config = PDFConfig(sections=PDFSectionOptions(table_of_contents=False))
        rendered = _composer(config).render()
        assert rendered.toc_offset == 0
        assert rendered.toc_entries == [("Summary", 2), ("Details", 3)]
        assert rendered.page_count == 3

    def test_without_cover(self):
        rendered = _composer(cover=False).render()
        assert rendered.toc_entries == [("Summary", 2), ("Details", 3)]
        assert rendered.page_count == 3

    def test_cover_only(self):
        rendered = _composer(sections=()).render()
        assert rendered.toc_entries == []
        assert rendered.page_count == 1

    def test_multi_page_toc(self):
        titles = [f"Section {i}" for i in range(1, 81)]
        rendered = _composer(sections=titles, new_page=False).render()
        assert rendered.toc_offset >= 2
        first_page = rendered.toc_entries[0][1]
        assert first_page == 1 + rendered.toc_offset + 1
        pages = [page for _, page in rendered.toc_entries]
        assert pages == sorted(pages)
        assert pages[-1] <= rendered.page_count

    def test_sections_sharing_a_page(self):
        rendered = _composer(new_page=False).render()
        assert rendered.toc_entries[0][1] == rendered.toc_entries[1][1]

    def test_toc_page_lists_titles(self, pdf_reader):
        rendered = _composer().render()
        toc_text = pdf_reader(rendered.pdf_bytes).pages[1].extract_text()
        assert "Table of Contents" in toc_text
        assert "Summary" in toc_text
        assert "Details" in toc_text


# =========================================================================
# Bookmarks & outline
# =========================================================================

class TestOutline:
    def test_outline_matches_toc(self, pdf_reader):
        rendered = _composer().render()
        assert _outline(pdf_reader(rendered.pdf_bytes)) == rendered.toc_entries

    def test_outline_without_toc(self, pdf_reader):
        config = PDFConfig(sections=PDFSectionOptions(table_of_contents=False))
        rendered = _composer(config).render()
        assert _outline(pdf_reader(rendered.pdf_bytes)) == [("Summary", 2), ("Details", 3)]

    def test_outline_after_split_table(self, pdf_reader):
        composer = _composer(sections=())
        composer.add_section("Ledger", _long_table)
        composer.add_section("Closing", partial(_paragraphs, "Closing notes", composer.styles["body"]))
        rendered = composer.render()

        pages = dict(rendered.toc_entries)
        assert pages["Closing"] - pages["Ledger"] >= 2
        assert _outline(pdf_reader(rendered.pdf_bytes)) == rendered.toc_entries

    def test_multi_page_toc_outline(self, pdf_reader):
        titles = [f"Section {i}" for i in range(1, 41)]
        rendered = _composer(sections=titles, new_page=False).render()
        assert _outline(pdf_reader(rendered.pdf_bytes)) == rendered.toc_entries


# =========================================================================
# Footers
# =========================================================================

class TestFooters:
    def test_numbered_from_first_content_page(self, pdf_reader):
        composer = _composer(sections=("Summary",))
        composer.add_section("Ledger", _long_table)
        rendered = composer.render()
        pages = pdf_reader(rendered.pdf_bytes).pages
        assert len(pages) == rendered.page_count

        for number, page in enumerate(pages, start=1):
            found = FOOTER.search(page.extract_text())
            if number <= 2:
                # cover and table of contents
                assert found is None
            else:
                assert found is not None
                assert (int(found.group(1)), int(found.group(2))) == (number, rendered.page_count)

    def test_footer_text(self, pdf_reader):
        rendered = _composer().render()
        assert "Test Project" in pdf_reader(rendered.pdf_bytes).pages[2].extract_text()

    def test_no_toc_numbers_after_cover(self, pdf_reader):
        config = PDFConfig(sections=PDFSectionOptions(table_of_contents=False))
        pages = pdf_reader(_composer(config).render().pdf_bytes).pages
        assert FOOTER.search(pages[0].extract_text()) is None
        assert FOOTER.search(pages[1].extract_text()) is not None


# =========================================================================
# Output
# =========================================================================

class TestOutput:
    def test_writes_file(self, tmp_path):
        path = tmp_path / "out" / "report.pdf"
        rendered = _composer().render(str(path))
        assert path.read_bytes() == rendered.pdf_bytes

    def test_narrow_margins(self):
        config = PDFConfig(margin_preset="narrow")
        assert config.content_width > PDFConfig().content_width
        assert _composer(config).render().page_count == 4

    def test_unknown_margin_preset(self):
        with pytest.raises(ValueError):
            PDFConfig(margin_preset="huge").margin
