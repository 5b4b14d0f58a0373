"""Shared page chrome (layout, navigation, toast) plus the index and health routes."""
from __future__ import annotations

import html
from typing import Optional

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse

from biblioteca.repositories.store_provider import LOCAL
from biblioteca.services.entity_controller import EntityController
from biblioteca.services.notifications import Notification

router = APIRouter(tags=["pages"])

_TOAST_COLORS = {
    "success": "#22c55e",
    "error": "#ef4444",
    "info": "#3b82f6",
}
_TOAST_ICONS = {"success": "✓", "error": "✕", "info": "ℹ"}


def get_controller(request: Request, name: str) -> EntityController:
    controllers = getattr(getattr(request.app, "state", None), "controllers", None) or {}
    ctrl = controllers.get(name)
    if not ctrl:
        raise RuntimeError(f"Controller {name} not configured")
    return ctrl


def toast_html(notification: Optional[Notification], dismiss_action: str) -> str:
    if not notification:
        return ""
    color = _TOAST_COLORS.get(notification.severity, _TOAST_COLORS["info"])
    icon = _TOAST_ICONS.get(notification.severity, "")
    return f"""
      <div id='toast' role='status' data-severity='{notification.severity}'
           style='position:fixed;top:1rem;right:1rem;min-width:300px;z-index:50;background:{color};color:#fff;padding:1rem 1.5rem;border-radius:.5rem;display:flex;gap:.75rem;align-items:center'>
        <strong>{icon}</strong>
        <span style='flex:1'>{html.escape(notification.message)}</span>
        <form method='post' action='{dismiss_action}' style='margin:0'>
          <button aria-label='Cerrar' style='background:none;border:none;color:#fff;padding:0;margin:0;font-size:1.25rem'>×</button>
        </form>
      </div>
      <script>
        setTimeout(function(){{ var t = document.getElementById('toast'); if (t) t.remove(); }}, {int(notification.timeout_ms)});
      </script>
    """


def layout(title: str, body: str, *, mode: Optional[str] = None) -> HTMLResponse:
    badge = ""
    if mode == LOCAL:
        badge = "<li><mark>Modo local</mark></li>"
    return HTMLResponse(
        f"""
        <!doctype html><html lang='es'><head>
        <meta charset='utf-8'><meta name='viewport' content='width=device-width,initial-scale=1'>
        <link rel="stylesheet" href="https://unpkg.com/@picocss/pico@2.0.6/css/pico.min.css">
        <title>{html.escape(title)}</title>
        <style>table {{font-size:14px}} td,th {{white-space:nowrap}}</style>
        </head><body>
        <main class="container">
          <nav><ul><li><strong>Gestión de Libros y Autores</strong></li>{badge}</ul>
              <ul><li><a href="/autores">Autores</a></li><li><a href="/libros">Libros</a></li></ul>
          </nav>
          {body}
        </main>
        </body></html>
        """
    )


@router.get("/", response_class=HTMLResponse)
async def index(request: Request):
    from .autores import render_authors_page

    ctrl = get_controller(request, "autores")
    await ctrl.mount()
    return render_authors_page(ctrl)


@router.get("/health")
def health(request: Request):
    provider = request.app.state.provider
    return {"ok": True, "mode": provider.mode}
