"""
Web layer: FastAPI routers, dependencies and middleware.
"""
