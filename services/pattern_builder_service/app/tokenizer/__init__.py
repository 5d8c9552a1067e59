"""
Tokenizer module for splitting filenames and inferring segment types.
"""

from .models import ImageRole, Token, TokenAnalysis, TokenSuggestion, TokenType
from .inference import TypeInferenceEngine
from .segments import SegmentAction, SegmentLabel, UnknownSegmentHandler, UnknownSegmentSummary
from .tokenizer import FilenameTokenizer

__all__ = [
    "FilenameTokenizer",
    "ImageRole",
    "SegmentAction",
    "SegmentLabel",
    "Token",
    "TokenAnalysis",
    "TokenSuggestion",
    "TokenType",
    "TypeInferenceEngine",
    "UnknownSegmentHandler",
    "UnknownSegmentSummary",
]
