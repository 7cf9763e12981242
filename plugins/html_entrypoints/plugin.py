"""
An MkDocs plugin that writes HTML files referencing the outputs of a bundler
build (esbuild-style metafile), with the right <script>/<link> tags injected.
"""

import logging
from pathlib import Path
from typing import List

from mkdocs.config import config_options as c
from mkdocs.config.defaults import MkDocsConfig
from mkdocs.plugins import BasePlugin

from plugins.html_entrypoints.config import LOG_LEVELS, BuildOptions, HtmlFileConfig
from plugins.html_entrypoints.pipeline import load_metafile, run, validate_build_options

# MkDocs plugin logger namespace so debug logs appear only with `--verbose`.
log = logging.getLogger("mkdocs.plugins.html_entrypoints")


class HtmlEntrypointsPlugin(BasePlugin):
    """MkDocs plugin generating HTML pages for bundler entry points.

    Configuration options:
    - files (list): HTML targets. Each has `filename`, `entry_points` and
      optionally `title`, `html_template`, `define`, `script_loading`,
      `favicon`, `find_related_css_files`, `find_related_output_files`
      (deprecated), `inline`, `extra_scripts` and `hash`.
    - metafile (str): Path of the bundler metafile. Required.
    - outdir (str): The bundler's output directory. Required.
    - public_path (str): URL prefix for asset hrefs.
    - entry_names (str): The bundler's naming template, e.g. "[dir]/[name]-[hash]".
    - log_level (str): "info" or more verbose prints per-file summaries.

    Relative paths are resolved against the directory holding mkdocs.yml.
    """

    config_scheme = (
        ('files',       c.Type(list, default=[])),
        ('metafile',    c.Type(str, default="")),
        ('outdir',      c.Type(str, default="")),
        ('public_path', c.Type(str, default="")),
        ('entry_names', c.Type(str, default="")),
        ('log_level',   c.Choice(LOG_LEVELS, default="warning")),
    )

    def __init__(self):
        super().__init__()
        self.files: List[HtmlFileConfig] = []

    def on_config(self, config: MkDocsConfig):
        """Normalize the configured HTML targets once per configuration load."""
        self.files = [HtmlFileConfig.from_dict(raw) for raw in self.config.get("files") or []]
        for file_config in self.files:
            if file_config.find_related_output_files:
                log.warning(
                    "[html_entrypoints] '%s': 'find_related_output_files' is deprecated, "
                    "use 'find_related_css_files' instead",
                    file_config.filename,
                )
        return config

    def build_options(self, config: MkDocsConfig) -> BuildOptions:
        config_file_path = config.get("config_file_path")
        base_dir = str(Path(config_file_path).resolve().parent) if config_file_path else ""
        return BuildOptions(
            metafile=self.config.get("metafile") or None,
            outdir=self.config.get("outdir") or None,
            public_path=self.config.get("public_path") or None,
            entry_names=self.config.get("entry_names") or None,
            log_level=self.config.get("log_level") or "warning",
            base_dir=base_dir,
        )

    def on_post_build(self, *, config: MkDocsConfig) -> None:
        """After build: generate every configured HTML file."""
        options = self.build_options(config)
        validate_build_options(options)

        outputs = load_metafile(str(Path(options.base_dir or ".") / options.metafile))
        log.debug("[html_entrypoints] loaded %d output(s) from %s", len(outputs), options.metafile)
        run(self.files, outputs, options)
