"""Domain models for the RPC client (envelopes, session state, errors)."""
