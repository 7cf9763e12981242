"""
Match configured entry points against the bundler's metafile outputs and find
the output files that belong with each match (stylesheets, hashed siblings).
"""

import logging
import posixpath
import re
from typing import Any, Dict, List, Optional, Pattern

from plugins.html_entrypoints.config import HtmlFileConfig
from plugins.html_entrypoints.exceptions import UnmatchedEntryPointError

log = logging.getLogger("mkdocs.plugins.html_entrypoints")

# Capture patterns for the placeholders of the bundler's `entryNames` template.
# Hashes are 8 characters of the bundler's base32 alphabet.
DIR_REGEX = r"(?P<dir>\S+/?)"
HASH_REGEX = r"(?P<hash>[A-Z2-7]{8})"
NAME_REGEX = r"(?P<name>[^\s/]+)"

Asset = Dict[str, Any]


def flatten_output(path: str, record: Optional[Dict[str, Any]]) -> Asset:
    """Return a metafile output record with its own path folded in."""
    return {"path": path, **(record or {})}


def collect_entrypoints(entry_points: List[str], outputs: Dict[str, Dict[str, Any]]) -> List[Asset]:
    """Return every output produced by one of `entry_points`.

    Results follow the iteration order of `outputs`, not the order the entry
    points were requested in. Raises `UnmatchedEntryPointError` when any
    requested entry point has no output.
    """
    assets = [
        flatten_output(path, record)
        for path, record in outputs.items()
        if record.get("entryPoint") and record["entryPoint"] in entry_points
    ]

    matched = {asset["entryPoint"] for asset in assets}
    unmatched = [e for e in entry_points if e not in matched]
    if not assets or unmatched:
        raise UnmatchedEntryPointError(entry_points, unmatched)
    return assets


def compile_entry_names_pattern(entry_names: str) -> Pattern[str]:
    """Compile a regex extracting `dir`, `name` and `hash` from an output path.

    Literal text of the template is escaped before the placeholders are
    swapped for capture groups, so regex metacharacters in the template never
    leak into the pattern.
    """
    pattern = (
        re.escape(entry_names)
        .replace(re.escape("[hash]"), HASH_REGEX, 1)
        .replace(re.escape("[name]"), NAME_REGEX, 1)
        .replace(re.escape("[dir]"), DIR_REGEX, 1)
    )
    return re.compile(pattern)


def compile_sibling_pattern(entry_names: str, name: str, directory: str) -> Pattern[str]:
    """Compile a regex matching outputs sharing `name` and `dir`, with any hash."""
    literal = entry_names.replace("[name]", name, 1).replace("[dir]", directory, 1)
    return re.compile(re.escape(literal).replace(re.escape("[hash]"), HASH_REGEX, 1))


def find_name_related_output_files(
    anchor: Asset,
    outputs: Dict[str, Dict[str, Any]],
    entry_names: Optional[str] = None,
) -> List[Asset]:
    """Find outputs named like `anchor` (the anchor itself included).

    Without `entry_names`, related outputs sit next to the anchor and only
    differ by extension. With it, the anchor's `[dir]` and `[name]` are
    extracted first and every output matching the template with those values
    (and any `[hash]`) is related.
    """
    anchor_dir = posixpath.dirname(anchor["path"])
    anchor_name = posixpath.splitext(posixpath.basename(anchor["path"]))[0]

    if not entry_names:
        return [
            flatten_output(path, record)
            for path, record in outputs.items()
            if posixpath.dirname(path) == anchor_dir
            and posixpath.splitext(posixpath.basename(path))[0] == anchor_name
        ]

    match = compile_entry_names_pattern(entry_names).search(posixpath.join(anchor_dir, anchor_name))
    groups = match.groupdict() if match else {}
    name = groups.get("name") or ""
    directory = groups.get("dir") or ""

    sibling_pattern = compile_sibling_pattern(entry_names, name, directory)
    return [
        flatten_output(path, record)
        for path, record in outputs.items()
        if sibling_pattern.search(path)
    ]


def find_related_output_files(
    anchor: Asset,
    outputs: Dict[str, Dict[str, Any]],
    file_config: HtmlFileConfig,
    entry_names: Optional[str] = None,
) -> Dict[str, Asset]:
    """Return the anchor and its related outputs, keyed by path, anchor first."""
    related: Dict[str, Asset] = {anchor["path"]: anchor}

    css_bundle = anchor.get("cssBundle")
    if file_config.find_related_css_files and css_bundle:
        related[css_bundle] = flatten_output(css_bundle, outputs.get(css_bundle))

    if file_config.find_related_output_files:
        for asset in find_name_related_output_files(anchor, outputs, entry_names):
            related[asset["path"]] = asset

    return related


def collect_output_files(
    file_config: HtmlFileConfig,
    outputs: Dict[str, Dict[str, Any]],
    entry_names: Optional[str] = None,
) -> List[Asset]:
    """Return all assets of one HTML file, deduplicated by path in first-seen order."""
    collected: Dict[str, Asset] = {}
    for anchor in collect_entrypoints(file_config.entry_points, outputs):
        related = find_related_output_files(anchor, outputs, file_config, entry_names)
        for path, asset in related.items():
            collected.setdefault(path, asset)
        log.debug("[html_entrypoints] %s: %s -> %d related file(s)", file_config.filename, anchor["path"], len(related))
    return list(collected.values())
