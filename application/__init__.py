"""
Application Layer for the RtF Progression API.

This package contains:
- ports/: Abstract repository and cache interfaces (what the engine needs)
- exceptions.py: Errors raised by services and mapped to HTTP status codes
"""
