"""
Core app - Shared plumbing used by every other app.

- Service errors mapped to HTTP statuses (exceptions)
- Page/limit pagination (pagination)
- Cache-backed rate limiting (rate_limit)
- Health endpoint and the demo `seed` command
"""
