"""Keyword search engine for generated documentation search data.

This package provides the lookup stack:
- partition: decoding of JSON and Doxygen ``searchData`` partition files
- store: mutable entry store used while building an index
- search_index: the immutable, shareable index
- matcher: prefix, substring and fuzzy keyword queries
- loader: merging many partitions into one published index
"""
