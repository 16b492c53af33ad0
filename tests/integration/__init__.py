"""
Integration Tests Package
=========================

- test_pipeline.py: coordinator + both workers over in-memory queue/store
- test_api.py: FastAPI control surface via TestClient

Run all integration tests:
    pytest tests/integration/ -v
"""
