"""
Read-only data providers consumed by the engine.
"""
