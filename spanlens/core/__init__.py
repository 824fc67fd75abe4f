"""
Core Layer

Configuration, structured logging and the exception hierarchy shared by the
relay server and the client-side engine.
"""
