"""HTML rendering of the information snapshot.

The template file is read and compiled on every request, so edits to it
show up without a restart and a missing file only fails the requests that
need it.
"""

from __future__ import annotations

import logging
from pathlib import Path

from jinja2 import Environment, Template, TemplateError, select_autoescape

from devserver.domain.models import InfoSnapshot
from devserver.errors import TemplateLoadError

logger = logging.getLogger(__name__)

# Autoescape everything: the template is always HTML whatever its file name.
_environment = Environment(autoescape=select_autoescape(default=True, default_for_string=True))


def load_template(path: Path | str) -> Template:
    """Read and compile the template at ``path``.

    Raises:
        TemplateLoadError: If the file cannot be read or fails to compile.
    """
    path = Path(path)
    try:
        source = path.read_text(encoding="utf-8")
    except OSError as e:
        raise TemplateLoadError(f"cannot read template {path}: {e}", path=str(path)) from e

    try:
        return _environment.from_string(source)
    except TemplateError as e:
        raise TemplateLoadError(f"template parse error in {path}: {e}", path=str(path)) from e


def render_snapshot(path: Path | str, snapshot: InfoSnapshot) -> str:
    """Render ``snapshot`` into the template at ``path``.

    Template variables are the snapshot's wire names: ``WelcomeMsg``,
    ``Time`` and ``HostIP``.
    """
    template = load_template(path)
    try:
        return template.render(**snapshot.to_wire())
    except TemplateError as e:
        raise TemplateLoadError(f"template render error in {path}: {e}", path=str(path)) from e
