"""Tokenizers that turn XML bytes into parse events."""

from .expat import ExpatTokenizer
