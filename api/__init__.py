"""API package - FastAPI routes, middleware and dependencies"""
