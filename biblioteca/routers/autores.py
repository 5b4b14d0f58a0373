from __future__ import annotations

import html

from fastapi import APIRouter, Form, Request
from fastapi.responses import HTMLResponse

from biblioteca.services.author_controller import AuthorController
from biblioteca.services.entity_controller import ControllerState

from .pages import get_controller, layout, toast_html

router = APIRouter(prefix="/autores", tags=["autores"])


def _controller(request: Request) -> AuthorController:
    return get_controller(request, "autores")


def _author_row(author) -> str:
    author_id = html.escape(author.id)
    return (
        "<tr>"
        f"<td>{html.escape(author.name)}</td>"
        f"<td>{html.escape(author.nationality)}</td>"
        "<td>"
        f"<form method='post' action='/autores/{author_id}/editar' style='display:inline'>"
        "<button class='secondary' style='margin:0 4px'>Editar</button></form>"
        f"<form method='post' action='/autores/{author_id}/eliminar' style='display:inline' "
        "onsubmit=\"return confirm('¿Estás seguro de que deseas eliminar este autor?');\">"
        "<input type='hidden' name='confirmado' value='1'>"
        "<button class='secondary' style='margin:0 4px'>Eliminar</button></form>"
        "</td>"
        "</tr>"
    )


def render_authors_page(ctrl: AuthorController) -> HTMLResponse:
    editing = ctrl.state is ControllerState.EDITING
    rows = "\n".join(_author_row(a) for a in ctrl.records)
    cancel = (
        "<button type='submit' formaction='/autores/cancelar' formnovalidate class='secondary'>Cancelar</button>"
        if editing
        else ""
    )
    disabled = "" if ctrl.can_submit else "disabled"
    body = f"""
    {toast_html(ctrl.notification, '/autores/notificacion/cerrar')}
    <h2>Gestión de Autores</h2>
    <article>
      <h4>{'Editar Autor' if editing else 'Nuevo Autor'}</h4>
      <form method='post' action='/autores'>
        <fieldset {disabled}>
          <label>Nombre <input name='nombre' placeholder='Nombre del autor' value='{html.escape(ctrl.form['name'])}' required></label>
          <label>Nacionalidad <input name='nacionalidad' placeholder='Nacionalidad del autor' value='{html.escape(ctrl.form['nationality'])}' required></label>
        </fieldset>
        <div class='grid'>
          <button {disabled}>{'Actualizar' if editing else 'Crear'}</button>
          {cancel}
        </div>
      </form>
    </article>
    <article>
      <h4>Lista de Autores</h4>
      <table role='grid'>
        <thead><tr><th>Nombre</th><th>Nacionalidad</th><th>Acciones</th></tr></thead>
        <tbody>{rows or '<tr><td colspan="3">No hay autores registrados</td></tr>'}</tbody>
      </table>
    </article>
    """
    return layout("Autores", body, mode=ctrl.source)


@router.get("", response_class=HTMLResponse)
async def authors_page(request: Request):
    ctrl = _controller(request)
    await ctrl.mount()
    return render_authors_page(ctrl)


@router.post("", response_class=HTMLResponse)
async def submit_author(request: Request, nombre: str = Form(""), nacionalidad: str = Form("")):
    ctrl = _controller(request)
    ctrl.set_form(name=nombre, nationality=nacionalidad)
    await ctrl.submit()
    return render_authors_page(ctrl)


@router.post("/cancelar", response_class=HTMLResponse)
def cancel_author(request: Request):
    ctrl = _controller(request)
    ctrl.cancel()
    return render_authors_page(ctrl)


@router.post("/notificacion/cerrar", response_class=HTMLResponse)
def dismiss_author_notification(request: Request):
    ctrl = _controller(request)
    ctrl.dismiss_notification()
    return render_authors_page(ctrl)


@router.post("/{author_id}/editar", response_class=HTMLResponse)
def edit_author(author_id: str, request: Request):
    ctrl = _controller(request)
    ctrl.edit(author_id)
    return render_authors_page(ctrl)


@router.post("/{author_id}/eliminar", response_class=HTMLResponse)
async def delete_author(author_id: str, request: Request, confirmado: str = Form("")):
    ctrl = _controller(request)
    await ctrl.delete(author_id, confirmed=confirmado == "1")
    return render_authors_page(ctrl)
