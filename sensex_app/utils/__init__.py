"""
Utility functions module.

Time Semantics:
- The session window and the reset minute are judged on local wall-clock time
- Clocks are injected as zero-argument callables so tests can simulate any time
- Upstream time labels are kept as given; only missing ones use the fetch time
"""
