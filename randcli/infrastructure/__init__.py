"""Infrastructure Layer: Contains concrete implementations and adapters.

Connects the client to the outside world (HTTPS transport, configuration
files, the console) and holds the throttling machinery.
"""
