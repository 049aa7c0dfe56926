"""FastAPI application exposing the agents over HTTP."""
