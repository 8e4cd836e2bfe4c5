"""Streamlit views. Imported lazily by app.py."""
