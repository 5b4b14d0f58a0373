"""Biblioteca: admin pages for authors and books with offline fallback."""
