"""
Exception hierarchy for report generation.

Library code raises these; the Streamlit layer catches them and
shows a human-readable message.
"""


class ReportError(Exception):
    """Base class for all report pipeline errors."""


class ConfigurationError(ReportError):
    """Missing or invalid settings (e.g. no Supabase credentials)."""


class ReportExportError(ReportError):
    """Fetching, rendering or storing a report failed."""


class ArtifactDeleteError(ReportError):
    """A generated artifact could not be removed from storage."""


class ReportLayoutError(ReportError):
    """Table of contents page numbers do not match the rendered document."""
