"""
Channel Crawler - Serving Layer

- api: FastAPI control surface (queue searches, status, channel export)
"""
