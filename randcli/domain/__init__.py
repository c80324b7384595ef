"""Domain Layer: value objects, envelopes, session state and error types.

Has no dependencies on infrastructure; everything else in the package
builds on these definitions.
"""
