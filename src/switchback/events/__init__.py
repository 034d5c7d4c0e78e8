"""Events — priority-ordered listener dispatch.

Listeners are registered per event id and materialised lazily on every
trigger. The last completed event and its results are kept per id.
"""
