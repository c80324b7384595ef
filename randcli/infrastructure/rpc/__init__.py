"""JSON-RPC building blocks.

Request building, HTTP transport, response classification and result
extraction for the random.org API.
"""
