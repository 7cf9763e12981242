"""
Render an HTML target's template and inject the tags for its bundler assets.
"""

import hashlib
import html
import logging
import os
import posixpath
import re
from typing import Any, Dict, List, Optional

from jinja2 import Environment, TemplateError

from plugins.html_entrypoints.config import BuildOptions, ExtraScript, HtmlFileConfig
from plugins.html_entrypoints.exceptions import TemplateRenderError
from plugins.html_entrypoints.paths import resolve_href

log = logging.getLogger("mkdocs.plugins.html_entrypoints")

DEFAULT_HTML_TEMPLATE = """
<!DOCTYPE html>
<html>
  <head>
    <meta charset="utf-8" />
  </head>
  <body>
  </body>
</html>
"""

# Tags are spliced in right after the first closing title tag.
INJECTION_ANCHOR = "</title>"

TITLE_RE = re.compile(r"(<title\b[^>]*>)(.*?)(</title>)", re.IGNORECASE | re.DOTALL)
HEAD_CLOSE_RE = re.compile(r"</head>", re.IGNORECASE)


# -------------------------------
# Template
# -------------------------------


def load_template(html_template: Optional[str], base_dir: str = "") -> str:
    """Return the template text for an HTML target.

    `html_template` is read from disk when it names an existing file,
    otherwise it is used as the template text itself. Falls back to
    `DEFAULT_HTML_TEMPLATE` when unset or empty.
    """
    if html_template:
        template_path = os.path.join(base_dir, html_template)
        if os.path.isfile(template_path):
            with open(template_path, encoding="utf8") as f:
                return f.read() or DEFAULT_HTML_TEMPLATE
    return html_template or DEFAULT_HTML_TEMPLATE


def render_template(template: str, define: Optional[Dict[str, Any]] = None, title: Optional[str] = None) -> str:
    """Evaluate `template` with Jinja2, exposing `define` (and `title`).

    Without `define` the template is returned untouched: Jinja2 is never
    invoked, so templates that merely contain brace-like text are safe.
    """
    if define is None:
        return template

    env = Environment(keep_trailing_newline=True)
    try:
        return env.from_string(template).render(define=define, title=title)
    except TemplateError as e:
        raise TemplateRenderError(f"Failed to render HTML template: {e}") from e


def apply_title(html_text: str, title: Optional[str]) -> str:
    """Set the document title, adding a `<title>` to `<head>` when missing."""
    if title is None:
        return html_text

    escaped = html.escape(title)
    if TITLE_RE.search(html_text):
        return TITLE_RE.sub(lambda m: f"{m.group(1)}{escaped}{m.group(3)}", html_text, count=1)

    head_close = HEAD_CLOSE_RE.search(html_text)
    if head_close is None:
        return html_text
    pos = head_close.start()
    return f"{html_text[:pos]}<title>{escaped}</title>\n  {html_text[pos:]}"


# -------------------------------
# Tags
# -------------------------------


def _read_output(path: str, base_dir: str) -> bytes:
    with open(os.path.join(base_dir, path), "rb") as f:
        return f.read()


def _cache_buster(path: str, file_config: HtmlFileConfig, base_dir: str) -> str:
    """Return the query string appended to asset hrefs ("" when disabled)."""
    if file_config.hash is True:
        return "?" + hashlib.sha384(_read_output(path, base_dir)).hexdigest()[:8]
    if isinstance(file_config.hash, str) and file_config.hash:
        return f"?{file_config.hash}"
    return ""


def _script_attrs(script_loading: str) -> str:
    if script_loading == "module":
        return ' type="module"'
    if script_loading == "defer":
        return " defer"
    return ""


def build_asset_tag(asset: Dict[str, Any], file_config: HtmlFileConfig, options: BuildOptions) -> str:
    """Return the markup for one asset, or "" when its type is not injectable."""
    path = asset["path"]
    target_path = resolve_href(path, options.outdir, file_config.filename, options.public_path, options.base_dir)
    ext = posixpath.splitext(path)[1]

    if ext == ".js":
        if file_config.inline_js:
            content = _read_output(path, options.base_dir).decode("utf8")
            module = ' type="module"' if file_config.script_loading == "module" else ""
            return f"<script{module}>{content}</script>"
        target_path += _cache_buster(path, file_config, options.base_dir)
        return f'<script src="{target_path}"{_script_attrs(file_config.script_loading)}></script>'

    if ext == ".css":
        if file_config.inline_css:
            content = _read_output(path, options.base_dir).decode("utf8")
            return f"<style>{content}</style>"
        target_path += _cache_buster(path, file_config, options.base_dir)
        return f'<link rel="stylesheet" href="{target_path}">'

    if options.log_info:
        log.info("[html_entrypoints] found file %s, but it was neither .js nor .css", target_path)
    return ""


def build_extra_script_tag(script: ExtraScript) -> str:
    if isinstance(script, str):
        return f'<script src="{html.escape(script)}"></script>'

    attrs = "".join(
        f' {key}="{html.escape(str(value))}"'
        for key, value in (script.get("attrs") or {}).items()
    )
    return f'<script src="{html.escape(script["src"])}"{attrs}></script>'


def build_favicon_tag(file_config: HtmlFileConfig, options: BuildOptions) -> str:
    """Link the favicon at the location it is copied to inside `outdir`."""
    favicon_path = posixpath.join(options.outdir, posixpath.basename(file_config.favicon.replace("\\", "/")))
    href = resolve_href(favicon_path, options.outdir, file_config.filename, options.public_path, options.base_dir)
    return f'<link rel="icon" href="{href}">'


def inject_files_into_html(
    html_text: str,
    assets: List[Dict[str, Any]],
    file_config: HtmlFileConfig,
    options: BuildOptions,
) -> str:
    """Splice the tags for `assets` in after the first `</title>`.

    Templates without a `</title>` are returned unchanged and the tags are
    dropped.
    """
    tags: List[str] = []
    if file_config.favicon:
        tags.append(build_favicon_tag(file_config, options))
    tags.extend(build_asset_tag(asset, file_config, options) for asset in assets)
    tags.extend(build_extra_script_tag(script) for script in file_config.extra_scripts)

    return html_text.replace(INJECTION_ANCHOR, INJECTION_ANCHOR + "".join(tags), 1)
