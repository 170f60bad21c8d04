"""HTTP host layer built on FastAPI.

Key components:
- **adapter**: Conversion between Starlette requests/responses and the
  pipeline's ``HttpRequest``/``HttpResponse``; route mounting
- **main**: Application factory serving routes, the health check and the
  compiled interface document
- **utils**: orjson-backed JSON responses

FastAPI only matches URLs here. Authentication, validation and error
mapping all happen in ``hubkit.pipeline``.
"""
