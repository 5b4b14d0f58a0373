"""
Core utilities shared across the Biblioteca admin.

This package hosts configuration (env vars, storage paths, latency knobs) and
the loguru setup. Stores, controllers and routers depend on these primitives
instead of reading the environment themselves.
"""
