"""
Pytest suite for the Tip Jar backend and client core.

Test categories:
- Unit tests: validators, payment link builder, models, controller, form
- API tests: FastAPI app through httpx.ASGITransport
"""
