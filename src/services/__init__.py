"""Upstream clients and agent tools for Hunt Radar."""

from .algolia import AlgoliaClient
from .producthunt import ProductHuntClient
from .tools import TOOL_DEFINITIONS, HuntTools, build_tools

__all__ = [
    "AlgoliaClient",
    "ProductHuntClient",
    "TOOL_DEFINITIONS",
    "HuntTools",
    "build_tools",
]
