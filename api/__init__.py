"""
FastAPI API package for the image recognition gateway.

Exposes:
- `main` : `create_app(settings)` with `/recognize`, `/health` and the
  `/output` static file mount.
"""
