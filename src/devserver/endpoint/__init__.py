"""HTTP and WebSocket endpoints for devserver.

Builds the FastAPI application that uvicorn serves: informational
snapshot routes, status and latency diagnostics, a redirect, and the
WebSocket echo.
"""
