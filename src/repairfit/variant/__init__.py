from .base import Variant
from .source import SourceVariant, resolve_command

__all__ = ["Variant", "SourceVariant", "resolve_command"]
