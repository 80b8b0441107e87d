"""Business logic services.

Services are called by route handlers and orchestrate database and blob
storage operations. Import service modules directly
(e.g. ``from vidtube.services import videos as videos_service``).
"""
