"""Infrastructure Layer: Contains concrete implementations and adapters.

Connects the queue to the outside world (HTTP APIs, configuration files,
console output) by implementing the interfaces defined in the domain layer.
"""
