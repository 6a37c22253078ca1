"""
Domain layer for the RtF Progression API.

Pure domain models independent of infrastructure concerns
(database, API, cache drivers).
"""
