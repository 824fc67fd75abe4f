"""
Spanlens

Token-streaming chat relay plus a cascading span-explanation engine
(dictionary → encyclopedia → assistant).
"""

__version__ = "1.0.0"
