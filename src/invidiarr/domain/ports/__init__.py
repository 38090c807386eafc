from .extractor import ExtractorPluginPort
from .fetcher import JsonFetcherPort, TextFetcherPort

__all__ = [
    "ExtractorPluginPort",
    "JsonFetcherPort",
    "TextFetcherPort",
]
