"""HTTP server — FastAPI app and routes."""
