"""HTTP surface (FastAPI): app factory, routers, dependencies, error mapping."""
