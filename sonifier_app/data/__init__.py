"""
Price data module.

Fetching, parsing and validation of historical price series, and the
immutable PriceSeries the playback engine reads from.
"""
