"""LLM integration layer.

This package is intentionally small:
- One outbound request per call, no retries, no connection reuse.
- No prompt/output logging.
- Configuration is built once at startup and injected (see `deps`).
"""
