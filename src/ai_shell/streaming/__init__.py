"""
Lecture incrémentale des réponses du modèle.

- reader : StreamReader, CancelToken, filtrage des motifs exclus
- sources : adaptation d'une complétion en flux asynchrone
"""

from .reader import (
    CancelToken,
    ExclusionPattern,
    Reader,
    StreamReader,
    Writer,
    parse_content,
    read_data,
    strip_patterns,
)
from .sources import completion_to_iterable

__all__ = [
    "CancelToken",
    "ExclusionPattern",
    "Reader",
    "StreamReader",
    "Writer",
    "completion_to_iterable",
    "parse_content",
    "read_data",
    "strip_patterns",
]
