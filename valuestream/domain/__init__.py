"""
Domain Package

Entities and pure services of the value stream metrics engine.
"""
