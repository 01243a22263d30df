"""
Serving — FastAPI application exposing chat and ingestion over HTTP.
"""
