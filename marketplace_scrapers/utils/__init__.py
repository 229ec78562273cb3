from .common_extractors import (
    CommonExtractors,
    extract_price,
    parse_price,
    absolute_url,
    parse_document
)

__all__ = [
    'CommonExtractors',
    'extract_price',
    'parse_price',
    'absolute_url',
    'parse_document'
]
