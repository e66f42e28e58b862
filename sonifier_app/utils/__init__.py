"""
Utility functions module.

Time handling shared by the price parsers, the fetcher and the chart model.
Sample timestamps from the market data provider are authoritative; wall-clock
time is only used to place the fetch window.
"""
