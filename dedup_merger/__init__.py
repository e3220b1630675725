"""
Dedup Merger - A CLI tool to merge several folders into one destination folder
without duplicating content.

Features:
- Content-based deduplication (files are compared by hash, not by name)
- Any number of source folders, merged in the order given
- Same-folder duplicate and cross-folder conflict reports
- Never overwrites a file already in the destination
- Progress visualization
- SHA-256 by default, fast xxhash digests on request
"""

__version__ = "1.0.0"
