"""Member portal: a session-gated dashboard on FastAPI.

The ASGI application lives in ``portal.main``; run it with
``uvicorn portal.main:app``.
"""
