"""
Core infrastructure: configuration, logging, persistence and security primitives.
"""
