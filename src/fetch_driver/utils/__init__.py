"""Utility modules for Fetch Driver."""

from .sanitizer import mask_sensitive_data, mask_headers
from .shared import FormData, compact, src2name, to_search_params

__all__ = [
    'mask_sensitive_data',
    'mask_headers',
    'FormData',
    'compact',
    'src2name',
    'to_search_params',
]
