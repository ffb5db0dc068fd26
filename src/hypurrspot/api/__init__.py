"""REST API: FastAPI application, dependencies and routes."""
