"""
API Models

Pydantic request models for the relay endpoints.
"""

from .streaming import ChatRequestModel, ExplainRequestModel

__all__ = ["ChatRequestModel", "ExplainRequestModel"]
