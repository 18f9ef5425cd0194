"""
dotenv-merge - Merge a template dotenv file into a maintained destination.

Features:
- Destination values and layout win by default
- Freeze blocks (# dotenv-merge:freeze / # dotenv-merge:unfreeze) survive verbatim
- Optional appending of keys that only exist in the template
- Per statement type preferences and custom matching signatures
- Directory tree merging with progress visualization
- Fast change detection using xxhash
"""

__version__ = "1.0.0"
