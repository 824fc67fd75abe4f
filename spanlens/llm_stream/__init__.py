"""
LLM Stream Layer

Token-stream providers, prompt builders and the server-side stream relay.
"""
