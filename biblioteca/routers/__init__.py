"""
FastAPI routers grouped by page (autores, libros) plus the shared chrome.

Routers only call controller operations and render controller state; they
never talk to a store directly.
"""
