"""
Application Layer

FastAPI application hosting the stream relay.
"""
