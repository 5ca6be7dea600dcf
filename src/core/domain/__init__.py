"""Domain types.

Plain data and pure functions only: platforms, URLs and result models. Nothing
here performs I/O.
"""
