import asyncio
import logging
from html import escape
from typing import Callable, Dict, Iterable, Optional
from starlette.routing import Route
from starlette.requests import Request
from starlette.middleware import Middleware
from starlette.datastructures import FormData
from starlette.applications import Starlette
from starlette.responses import HTMLResponse
from mindustry_manager.local.config import effective_settings as config
from mindustry_manager.local.supervisor import CommandError, GameServer
from mindustry_manager.web.middleware import SecurityHeadersMiddleware

log = logging.getLogger("control_surface")

PAGE_TEMPLATE = """<!DOCTYPE html>
<html>

<head>
  <title>Mindustry Manager</title>
  <meta charset="utf-8">
  <link rel="stylesheet" href="https://cdn.jsdelivr.net/npm/bulma@0.9.3/css/bulma.min.css">
</head>

<body>
  <section class="section">
    <div class="container">
      <p class="notification {status_class}">{status}</p>
      <form class="box" action="/" method="POST">
        <div class="field is-grouped">
          <div class="control"><input class="input" type="text" name="map" value="{default_map}"></div>
          <div class="control"><input class="button is-success" type="submit" name="act" value="start"></div>
          <div class="control"><input class="button is-danger" type="submit" name="act" value="stop"></div>
        </div>
        <hr>
        <div class="field is-grouped">
          <div class="control">
            <div class="select">
              <select name="save">
{autosave_options}
              </select>
            </div>
          </div>
          <div class="control"><input class="button is-success" type="submit" name="act" value="load"></div>
        </div>
        <div class="field is-grouped">
          <div class="control"><input class="input" type="text" name="fsname" value="mysafe"></div>
          <div class="control"><input class="button is-success" type="submit" name="act" value="fssave"></div>
          <div class="control">
            <div class="select">
              <select name="fssave">
{manual_options}
              </select>
            </div>
          </div>
          <div class="control"><input class="button is-success" type="submit" name="act" value="fsload"></div>
        </div>
        <div class="field is-grouped">
          <div class="control"><input class="button" type="submit" name="act" value="pauseon"></div>
          <div class="control"><input class="button" type="submit" name="act" value="pauseoff"></div>
        </div>
      </form>
    </div>
  </section>
</body>

</html>
"""


def _render_options(names: Iterable[str]) -> str:
    return "\n".join(
        f'                <option value="{escape(name)}">{escape(name)}</option>'
        for name in names
    )


def render_page(server: GameServer) -> str:
    """Renders the control page for the current session state."""
    if not server.started:
        status, status_class = "Stopped", "is-light"
    elif server.autosave_enabled:
        status, status_class = "Running", "is-success is-light"
    else:
        status, status_class = "Paused", "is-warning is-light"

    return PAGE_TEMPLATE.format(
        status=status,
        status_class=status_class,
        default_map=escape(config.DEFAULT_MAP),
        autosave_options=_render_options(server.autosave_history()),
        manual_options=_render_options(server.manual_saves()),
    )


def _single(form: FormData, key: str) -> Optional[str]:
    """Returns the form value for `key` if exactly one was submitted."""
    values = form.getlist(key)
    return values[0] if len(values) == 1 else None


def resolve_action(server: GameServer, form: FormData) -> Optional[Callable[[], None]]:
    """
    Maps a submitted control form to a GameServer operation.

    :return: A callable performing the operation, or None when the action is
             unknown or its selection is missing.
    """
    act = _single(form, "act")
    simple_actions: Dict[str, Callable[[], None]] = {
        "stop": server.stop,
        "pauseon": lambda: server.pause(True),
        "pauseoff": lambda: server.pause(False),
    }
    if act in simple_actions:
        return simple_actions[act]

    # Actions that need a name from another field of the form.
    named_actions = {
        "start": ("map", server.start_game),
        "load": ("save", server.load),
        "fssave": ("fsname", server.save),
        "fsload": ("fssave", server.load),
    }
    if act not in named_actions:
        if act is not None:
            log.warning(f"Ignoring unknown action '{act}'.")
        return None

    field, operation = named_actions[act]
    name = _single(form, field)
    if not name or "\n" in name or "\r" in name:
        log.debug(f"Action '{act}' submitted without a usable '{field}' value. Ignoring.")
        return None
    return lambda: operation(name)


def create_app(server: GameServer) -> Starlette:
    """
    Builds the control surface application for a GameServer.

    :param server: The supervised game server.
    :return: The Starlette ASGI application.
    """

    async def control_page(request: Request) -> HTMLResponse:
        """Renders the control page and performs the submitted action on POST."""
        loop = asyncio.get_running_loop()
        if request.method == "POST":
            form = await request.form()
            action = resolve_action(server, form)
            if action is not None:
                log.debug(f"Control action '{form.get('act')}' from {request.client.host if request.client else '?'}")
                try:
                    await loop.run_in_executor(None, action)
                except CommandError as e:
                    log.error(f"unable to notify mindustry: {e}")

        html = await loop.run_in_executor(None, render_page, server)
        return HTMLResponse(html)

    routes = [
        Route("/", endpoint=control_page, methods=["GET", "POST"]),
    ]
    middleware = [
        Middleware(SecurityHeadersMiddleware),
    ]
    app = Starlette(debug=False, routes=routes, middleware=middleware)
    log.info("Control surface configured and ready.")
    return app
