"""
Model inference clients for stylist-ai.
"""

from stylist_ai.inference.base import ModelClient
from stylist_ai.inference.messages import MessagesApiClient

__all__ = [
    "MessagesApiClient",
    "ModelClient",
]
