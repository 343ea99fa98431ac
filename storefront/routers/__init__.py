"""
FastAPI routers grouped by domain (catalog, cart, checkout, auth, etc.).

Each file inside this package exposes an APIRouter included by the app
factory (app.py), keeping endpoint definitions close to their use cases.
"""
