"""Domain Event definitions.

Represents significant occurrences during an RPC call (deferral, dispatch,
success, failure) that callers may observe through an event sink.
"""
