"""HTTP surface for subgate, built on FastAPI."""
