"""Maskworks — FastAPI REST API layer.

This package exposes mask editing sessions over HTTP.

Modules
-------
main
    FastAPI application with all route handlers and the ``main()`` CLI
    entry point.
models
    Pydantic models for API request and response validation.
session_store
    Thread-safe in-memory registry of open editing sessions.
"""
