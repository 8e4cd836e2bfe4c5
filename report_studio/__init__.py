"""
Cost Report Studio.

PDF report generation for construction cost reports and cable schedules,
backed by Supabase tables and storage buckets.

Packages:
- calculations: totals aggregation and cable sizing
- db: Supabase store wrapper
- reporting: PDF builders, CSV export and the storage sink
- ui: Streamlit views
"""

__version__ = "1.0.0"
