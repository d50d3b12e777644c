"""Transformer module for converting study blocks to various output formats."""

from .base import BaseTransformer
from .ical_transformer import ICalTransformer
from .json_transformer import JsonTransformer

__all__ = ["BaseTransformer", "ICalTransformer", "JsonTransformer"]
