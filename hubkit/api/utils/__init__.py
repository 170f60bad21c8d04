"""API-specific utilities.

- **responses**: JSON response class using orjson
"""
