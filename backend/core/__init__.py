"""
core - domain-agnostic runtime primitives

- engine: event bus (publish/subscribe) and state machine
"""
