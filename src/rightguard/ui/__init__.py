"""Streamlit presentation layer for Right Guard."""
