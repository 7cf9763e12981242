"""
Path helpers for turning bundler output paths into hrefs.

Bundler metafiles always use forward slashes, and hrefs written into HTML are
URL-like, so everything returned from here is POSIX-style regardless of the
platform MkDocs runs on.
"""

import os
from typing import Optional


def to_posix(path: str) -> str:
    """Convert platform separators to forward slashes."""
    if os.sep == "/":
        return path
    return path.replace(os.sep, "/")


def join_segments(first: str, *rest: str) -> str:
    """Join path segments like `os.path.join`, but never drop earlier segments.

    A later segment starting with a separator is appended below the earlier
    ones instead of replacing them.
    """
    return os.path.join(first, *(p.lstrip("/\\") for p in rest))


def posix_join(*paths: str) -> str:
    """Join (and normalize) path segments, returning a forward-slash path."""
    return to_posix(os.path.normpath(join_segments(*paths)))


def join_with_public_path(public_path: Optional[str], rel_path: str) -> str:
    """Prefix `rel_path` with `public_path`, separated by exactly one slash.

    Mirrors how esbuild itself joins its `publicPath` option.
    """
    rel_path = to_posix(os.path.normpath(rel_path))

    if not public_path:
        public_path = "."

    slash = "" if public_path.endswith("/") else "/"
    return f"{public_path}{slash}{rel_path}"


def resolve_href(
    path: str,
    outdir: str,
    html_filename: str,
    public_path: Optional[str] = None,
    base_dir: str = "",
) -> str:
    """Return the href an HTML target should use to reference `path`.

    With a public path the href is based on the output directory. Without one
    it is relative to the directory of the HTML file itself, so the page keeps
    working wherever the output directory is served from.

    `path` and `outdir` are relative to `base_dir` (the bundler's working
    directory) unless they are absolute.
    """
    abs_path = os.path.join(base_dir, path)
    abs_outdir = os.path.join(base_dir, outdir)

    if public_path:
        return join_with_public_path(public_path, os.path.relpath(abs_path, abs_outdir or "."))

    html_file = join_segments(abs_outdir, html_filename)
    html_dir = os.path.dirname(os.path.normpath(html_file)) or "."
    return to_posix(os.path.relpath(abs_path, html_dir))
