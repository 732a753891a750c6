"""
FastAPI routers.

Each module exposes an APIRouter included by ``cadastro.app.create_app``.
"""
