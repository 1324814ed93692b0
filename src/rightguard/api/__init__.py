"""FastAPI surface for Right Guard."""
