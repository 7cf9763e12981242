"""
Generate one HTML file per configured target from a finished bundler build.

For every target: match its entry points in the metafile outputs, expand them
with related outputs, render the template, inject the tags and write the
result below `outdir`. Targets run in the configured order and the first
failure aborts the run.
"""

import json
import logging
import os
import shutil
import time
from pathlib import Path
from typing import Any, Dict, List, Tuple

from plugins.html_entrypoints.config import BuildOptions, HtmlFileConfig
from plugins.html_entrypoints.exceptions import PreconditionError
from plugins.html_entrypoints.paths import posix_join
from plugins.html_entrypoints.renderer import apply_title, inject_files_into_html, load_template, render_template
from plugins.html_entrypoints.resolver import collect_output_files

log = logging.getLogger("mkdocs.plugins.html_entrypoints")


def load_metafile(path: str) -> Dict[str, Dict[str, Any]]:
    """Read a bundler metafile and return its `outputs` mapping."""
    with open(path, encoding="utf8") as f:
        metafile = json.load(f)
    return metafile.get("outputs") or {}


def validate_build_options(options: BuildOptions) -> None:
    if not options.metafile:
        raise PreconditionError("metafile is not enabled")
    if not options.outdir:
        raise PreconditionError("outdir must be set")


def build_html_file(
    file_config: HtmlFileConfig,
    outputs: Dict[str, Dict[str, Any]],
    options: BuildOptions,
) -> Tuple[str, str]:
    """Return `(output path, html)` for one target without touching the disk."""
    assets = collect_output_files(file_config, outputs, options.entry_names)

    template = load_template(file_config.html_template, options.base_dir)
    rendered = render_template(template, file_config.define, file_config.title)
    rendered = apply_title(rendered, file_config.title)

    html = inject_files_into_html(rendered, assets, file_config, options)
    return posix_join(options.outdir, file_config.filename), html


def write_html_file(out: str, html: str, file_config: HtmlFileConfig, options: BuildOptions) -> Path:
    """Write a generated HTML file (and its favicon) below `base_dir`."""
    out_path = Path(options.base_dir or ".") / out
    # Several targets may share a directory.
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(html, encoding="utf8")

    if file_config.favicon:
        favicon_src = Path(options.base_dir or ".") / file_config.favicon
        favicon_dest = Path(options.base_dir or ".") / options.outdir / favicon_src.name
        favicon_dest.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(favicon_src, favicon_dest)

    if options.log_info:
        log.info("[html_entrypoints]   %s - %d", out, os.path.getsize(out_path))
    return out_path


def run(files: List[HtmlFileConfig], outputs: Dict[str, Dict[str, Any]], options: BuildOptions) -> List[Path]:
    """Generate every configured HTML file; returns the written paths."""
    validate_build_options(options)
    start_time = time.monotonic()

    written: List[Path] = []
    for file_config in files:
        out, html = build_html_file(file_config, outputs, options)
        written.append(write_html_file(out, html, file_config, options))

    if options.log_info:
        log.info("[html_entrypoints] done in %dms", (time.monotonic() - start_time) * 1000)
    return written
