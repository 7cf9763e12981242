"""
Normalized configuration for the html_entrypoints plugin.

`mkdocs.yml` hands us plain dicts; they are validated and turned into
`HtmlFileConfig` once, when MkDocs loads its configuration. Build-level
settings travel through the pipeline as a `BuildOptions` value instead of
living on the plugin instance.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from plugins.html_entrypoints.exceptions import HtmlConfigError

SCRIPT_LOADING_MODES = ("blocking", "defer", "module")

# Same level names the bundler uses for its own `logLevel` option.
LOG_LEVELS = ("silent", "error", "warning", "info", "debug", "verbose")
INFO_LOG_LEVELS = ("info", "debug")

ATTRIBUTE_NAME_RE = re.compile(r"^[A-Za-z_:][A-Za-z0-9_.:-]*$")

ExtraScript = Union[str, Dict[str, Any]]


@dataclass
class HtmlFileConfig:
    filename: str
    entry_points: List[str]
    title: Optional[str] = None
    html_template: Optional[str] = None
    define: Optional[Dict[str, Any]] = None
    script_loading: str = "defer"
    favicon: Optional[str] = None
    find_related_css_files: bool = True
    # Deprecated: use find_related_css_files instead.
    find_related_output_files: bool = False
    inline_css: bool = False
    inline_js: bool = False
    extra_scripts: List[ExtraScript] = field(default_factory=list)
    hash: Union[bool, str] = False

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "HtmlFileConfig":
        """Validate one entry of the `files` option and apply defaults."""
        if not isinstance(raw, dict):
            raise HtmlConfigError(f"Each entry of 'files' must be a mapping, got {raw!r}")

        filename = raw.get("filename")
        if not filename or not isinstance(filename, str):
            raise HtmlConfigError("Each entry of 'files' needs a 'filename'")

        entry_points = raw.get("entry_points")
        if isinstance(entry_points, str):
            entry_points = [entry_points]
        if not entry_points or not all(isinstance(e, str) for e in entry_points):
            raise HtmlConfigError(f"'{filename}': 'entry_points' must be a non-empty list of strings")

        script_loading = raw.get("script_loading") or "defer"
        if script_loading not in SCRIPT_LOADING_MODES:
            raise HtmlConfigError(
                f"'{filename}': 'script_loading' must be one of {', '.join(SCRIPT_LOADING_MODES)}, "
                f"got '{script_loading}'"
            )

        define = raw.get("define")
        if define is not None and not isinstance(define, dict):
            raise HtmlConfigError(f"'{filename}': 'define' must be a mapping")

        inline = raw.get("inline", False)
        if isinstance(inline, dict):
            inline_css = bool(inline.get("css", False))
            inline_js = bool(inline.get("js", False))
        else:
            inline_css = inline_js = bool(inline)

        extra_scripts = raw.get("extra_scripts") or []
        for script in extra_scripts:
            if isinstance(script, dict):
                if not script.get("src"):
                    raise HtmlConfigError(f"'{filename}': extra script {script!r} has no 'src'")
                for key in script.get("attrs") or {}:
                    if not isinstance(key, str) or not ATTRIBUTE_NAME_RE.match(key):
                        raise HtmlConfigError(f"'{filename}': invalid attribute name {key!r} on extra script")
            elif not isinstance(script, str):
                raise HtmlConfigError(f"'{filename}': extra script {script!r} must be a string or mapping")

        file_hash = raw.get("hash", False)
        if not isinstance(file_hash, (bool, str)):
            raise HtmlConfigError(f"'{filename}': 'hash' must be a boolean or a string")

        return cls(
            filename=filename,
            entry_points=list(entry_points),
            title=raw.get("title"),
            html_template=raw.get("html_template"),
            define=define,
            script_loading=script_loading,
            favicon=raw.get("favicon"),
            find_related_css_files=bool(raw.get("find_related_css_files", True)),
            find_related_output_files=bool(raw.get("find_related_output_files", False)),
            inline_css=inline_css,
            inline_js=inline_js,
            extra_scripts=list(extra_scripts),
            hash=file_hash,
        )


@dataclass
class BuildOptions:
    """Settings of the bundler build whose outputs are being injected.

    `metafile` and `outdir` are required; `validate_build_options` enforces
    that before any HTML file is processed. Relative paths (metafile output
    keys, `outdir`, templates, favicons) are resolved against `base_dir`.
    """

    metafile: Optional[str] = None
    outdir: Optional[str] = None
    public_path: Optional[str] = None
    entry_names: Optional[str] = None
    log_level: str = "warning"
    base_dir: str = ""

    @property
    def log_info(self) -> bool:
        return self.log_level in INFO_LOG_LEVELS
