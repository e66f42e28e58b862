"""
Event delivery module.

Sink contracts and the chart, audio, animation and stdout sinks that consume
the synchronized event bundles.
"""
