"""devserver -- Diagnostic HTTP server for exercising clients and proxies.

Serves request-derived host information in several representations,
arbitrary status codes, controllable latency, a redirect and a WebSocket
echo endpoint. Every handler is stateless; nothing outlives its request.
"""

__version__ = "0.1.0"
