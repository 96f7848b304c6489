"""Routers package: HTTP endpoint definitions.

Files:
  v1/   versioned API routes (/api/v1/*)
"""
