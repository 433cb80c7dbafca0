"""
Resource facades for the ZAI API.

Each facade shapes request parameters for one endpoint family and delegates
to :class:`zai.core.Transport`. Keep facades thin: no state beyond the
transport reference.
"""

from .chat import Chat
from .embeddings import Embeddings
from .files import Files
from .images import Images

__all__ = [
    "Chat",
    "Embeddings",
    "Files",
    "Images",
]
