"""Business logic layer for cleanup app.

- Generic paginated expiry (``retention``)
- The job running every cleaner against one cutoff (``job``)
"""
