"""
PDF Builder Module.

Orchestrates the construction of a complete cost report PDF.

Sections (each optional through PDFSectionOptions):
1. Cover page
2. Table of contents (inserted after the cover)
3. Executive Summary & KPIs
4. Category Performance Details
5. Project Information + Report Details
6. Cost Summary with category breakdown
7. Detailed Line Items
8. Variations

No aggregation beyond calling the totals calculator - only document assembly.
"""
import logging
from functools import partial
from typing import Optional

from models.cost_report import ReportBundle
from report_studio.calculations.cost_totals import compute_report_totals, compute_variation_total

from .composer import RenderedReport, ReportComposer
from .figures import category_distribution_chart
from .layout import (
    build_category_details,
    build_cost_summary,
    build_detailed_line_items,
    build_executive_summary,
    build_page_cover,
    build_project_info,
    build_report_details,
    build_variations,
)
from .styles import PDFConfig

logger = logging.getLogger("CostReports.PDFBuilder")


def build_cost_report_pdf(
    bundle: ReportBundle,
    config: Optional[PDFConfig] = None,
    output_path: Optional[str] = None,
) -> RenderedReport:
    """Build the cost report PDF for one report bundle.

    Args:
        bundle: Report with its categories, variations and details
        config: PDF configuration (margins, sections, title)
        output_path: Optional file path to also save the PDF to

    Returns:
        RenderedReport with PDF bytes, page count and resolved TOC
    """
    config = config or PDFConfig()
    sections = config.sections
    report = bundle.report

    totals = compute_report_totals(bundle.categories)
    variation_total = compute_variation_total(bundle.variations)
    logger.info(
        "Building cost report %s for '%s': %d categories, %d variations, %d details",
        report.revision, report.project_name, len(totals.categories),
        len(bundle.variations), len(bundle.details),
    )

    footer = " | ".join(part for part in (report.project_name, report.revision) if part)
    composer = ReportComposer(config, footer_text=footer)
    styles = composer.styles
    width = config.content_width

    if sections.cover_page:
        composer.add_cover(partial(build_page_cover, report, config, styles))

    if sections.executive_summary:
        # Rendered once, embedded on every layout pass
        chart = category_distribution_chart(totals) if config.include_charts else None
        composer.add_section(
            "Executive Summary",
            partial(build_executive_summary, totals, styles, width, chart),
        )

    if sections.category_details:
        composer.add_section(
            "Category Performance Details",
            partial(build_category_details, totals, styles, width),
        )

    if sections.project_info:
        composer.add_section("Project Information", partial(build_project_info, report, styles, width))
        if bundle.details:
            composer.add_section(
                "Report Details",
                partial(build_report_details, bundle.details, report, styles),
                new_page=False,
            )

    if sections.cost_summary:
        composer.add_section(
            "Cost Summary",
            partial(build_cost_summary, totals, styles, width),
            new_page=False,
        )

    if sections.detailed_line_items and any(c.line_items for c in bundle.categories):
        composer.add_section(
            "Detailed Line Items",
            partial(build_detailed_line_items, bundle.categories, styles, width),
        )

    if sections.variations and bundle.variations:
        composer.add_section(
            "Variations",
            partial(build_variations, bundle.variations, variation_total, styles, width),
        )

    if not composer.section_titles and not composer.has_cover:
        raise ValueError("No report sections selected")

    rendered = composer.render(output_path)
    logger.info("Cost report built: %d pages, %d bytes", rendered.page_count, rendered.file_size)
    return rendered
