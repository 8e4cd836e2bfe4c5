import logging

import streamlit as st

# --- MODULE IMPORTS ---
from report_studio.config import Config
from report_studio.errors import ConfigurationError

logging.basicConfig(
    level=getattr(logging, Config.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("CostReports.App")


# UI Modules - Lazy Loading for faster startup
def render_cost_report_tab(*args, **kwargs):
    from report_studio.ui.cost_report_ui import render_cost_report_tab as _render
    return _render(*args, **kwargs)


def render_cable_schedule_tab(*args, **kwargs):
    from report_studio.ui.cable_ui import render_cable_schedule_tab as _render
    return _render(*args, **kwargs)


def render_handover_tab(*args, **kwargs):
    from report_studio.ui.handover_ui import render_handover_tab as _render
    return _render(*args, **kwargs)


def render_cable_sizing_tab(*args, **kwargs):
    from report_studio.ui.cable_ui import render_cable_sizing_tab as _render
    return _render(*args, **kwargs)


@st.cache_resource
def get_store():
    from report_studio.db import create_store
    return create_store(Config)


st.set_page_config(page_title=Config.APP_TITLE, layout=Config.APP_LAYOUT, page_icon=Config.APP_ICON)

# --- APP START ---

st.title(f"{Config.APP_ICON} {Config.APP_TITLE}")

try:
    store = get_store()
except ConfigurationError as e:
    logger.warning("Store unavailable: %s", e)
    store = None

tab_report, tab_cable, tab_handover, tab_sizing = st.tabs(
    ["Cost Report", "Cable Schedule", "Lighting Handover", "Cable Sizing"]
)

with tab_report:
    if store is None:
        st.error("Supabase is not configured. Set SUPABASE_URL and SUPABASE_KEY in .env.")
    else:
        render_cost_report_tab(store)

with tab_cable:
    if store is None:
        st.error("Supabase is not configured. Set SUPABASE_URL and SUPABASE_KEY in .env.")
    else:
        render_cable_schedule_tab(store)

with tab_handover:
    if store is None:
        st.error("Supabase is not configured. Set SUPABASE_URL and SUPABASE_KEY in .env.")
    else:
        render_handover_tab(store)

with tab_sizing:
    render_cable_sizing_tab()
