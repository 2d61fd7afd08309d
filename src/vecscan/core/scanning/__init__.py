"""Chunked line/token scanning of key-prefixed float files."""

from .engine import FILL, PEEK, FloatFileReader, TokenizingHandler, scan_steps
from .line_cursor import LineCursor
from .sinks import LineValuesSink, Sink, SumSink, VectorSink
from .source import ChunkSource
from .tokenizer import FloatTokenizer, parse_float

__all__ = [
    "FILL",
    "PEEK",
    "ChunkSource",
    "FloatFileReader",
    "FloatTokenizer",
    "LineCursor",
    "LineValuesSink",
    "Sink",
    "SumSink",
    "TokenizingHandler",
    "VectorSink",
    "parse_float",
    "scan_steps",
]
