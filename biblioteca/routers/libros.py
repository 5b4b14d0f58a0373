from __future__ import annotations

import html

from fastapi import APIRouter, Form, Request
from fastapi.responses import HTMLResponse

from biblioteca.domain.validation import MIN_PUBLICATION_YEAR, max_publication_year
from biblioteca.services.book_controller import BookController
from biblioteca.services.entity_controller import ControllerState

from .pages import get_controller, layout, toast_html

router = APIRouter(prefix="/libros", tags=["libros"])


def _controller(request: Request) -> BookController:
    return get_controller(request, "libros")


def _book_row(book) -> str:
    book_id = html.escape(book.id)
    return (
        "<tr>"
        f"<td>{html.escape(book.title)}</td>"
        f"<td>{int(book.publication_year)}</td>"
        f"<td>{html.escape(book.author_name or 'Desconocido')}</td>"
        "<td>"
        f"<form method='post' action='/libros/{book_id}/editar' style='display:inline'>"
        "<button class='secondary' style='margin:0 4px'>Editar</button></form>"
        f"<form method='post' action='/libros/{book_id}/eliminar' style='display:inline' "
        "onsubmit=\"return confirm('¿Estás seguro de que deseas eliminar este libro?');\">"
        "<input type='hidden' name='confirmado' value='1'>"
        "<button class='secondary' style='margin:0 4px'>Eliminar</button></form>"
        "</td>"
        "</tr>"
    )


def _author_options(ctrl: BookController) -> str:
    selected_id = ctrl.form.get("author_id", "")
    options = ["<option value=''>Selecciona un autor</option>"]
    for author in ctrl.authors:
        selected = " selected" if author.id == selected_id else ""
        options.append(f"<option value='{html.escape(author.id)}'{selected}>{html.escape(author.name)}</option>")
    return "".join(options)


def render_books_page(ctrl: BookController) -> HTMLResponse:
    editing = ctrl.state is ControllerState.EDITING
    rows = "\n".join(_book_row(b) for b in ctrl.records)
    cancel = (
        "<button type='submit' formaction='/libros/cancelar' formnovalidate class='secondary'>Cancelar</button>"
        if editing
        else ""
    )
    disabled = "" if ctrl.can_submit else "disabled"
    no_authors = (
        "" if ctrl.authors else "<mark role='alert' style='display:block'>Primero debes crear al menos un autor.</mark>"
    )
    body = f"""
    {toast_html(ctrl.notification, '/libros/notificacion/cerrar')}
    <h2>Gestión de Libros</h2>
    <article>
      <h4>{'Editar Libro' if editing else 'Nuevo Libro'}</h4>
      {no_authors}
      <form method='post' action='/libros'>
        <fieldset {disabled}>
          <label>Título <input name='titulo' placeholder='Título del libro' value='{html.escape(ctrl.form['title'])}' required></label>
          <label>Año de Publicación
            <input name='anio_publicacion' type='number' min='{MIN_PUBLICATION_YEAR}' max='{max_publication_year()}'
                   value='{html.escape(ctrl.form['publication_year'])}' required>
          </label>
          <label>Autor <select name='autor_id' required>{_author_options(ctrl)}</select></label>
        </fieldset>
        <div class='grid'>
          <button {disabled}>{'Actualizar' if editing else 'Crear'}</button>
          {cancel}
        </div>
      </form>
    </article>
    <article>
      <h4>Lista de Libros</h4>
      <table role='grid'>
        <thead><tr><th>Título</th><th>Año</th><th>Autor</th><th>Acciones</th></tr></thead>
        <tbody>{rows or '<tr><td colspan="4">No hay libros registrados</td></tr>'}</tbody>
      </table>
    </article>
    """
    return layout("Libros", body, mode=ctrl.source)


@router.get("", response_class=HTMLResponse)
async def books_page(request: Request):
    ctrl = _controller(request)
    await ctrl.mount()
    return render_books_page(ctrl)


@router.post("", response_class=HTMLResponse)
async def submit_book(
    request: Request,
    titulo: str = Form(""),
    anio_publicacion: str = Form(""),
    autor_id: str = Form(""),
):
    ctrl = _controller(request)
    ctrl.set_form(title=titulo, publication_year=anio_publicacion, author_id=autor_id)
    await ctrl.submit()
    return render_books_page(ctrl)


@router.post("/cancelar", response_class=HTMLResponse)
def cancel_book(request: Request):
    ctrl = _controller(request)
    ctrl.cancel()
    return render_books_page(ctrl)


@router.post("/notificacion/cerrar", response_class=HTMLResponse)
def dismiss_book_notification(request: Request):
    ctrl = _controller(request)
    ctrl.dismiss_notification()
    return render_books_page(ctrl)


@router.post("/{book_id}/editar", response_class=HTMLResponse)
def edit_book(book_id: str, request: Request):
    ctrl = _controller(request)
    ctrl.edit(book_id)
    return render_books_page(ctrl)


@router.post("/{book_id}/eliminar", response_class=HTMLResponse)
async def delete_book(book_id: str, request: Request, confirmado: str = Form("")):
    ctrl = _controller(request)
    await ctrl.delete(book_id, confirmed=confirmado == "1")
    return render_books_page(ctrl)
