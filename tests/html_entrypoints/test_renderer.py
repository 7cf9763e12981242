"""
Tests for template rendering and tag injection.
"""

import hashlib
import logging

import pytest
from bs4 import BeautifulSoup
from mkdocs.exceptions import PluginError

from plugins.html_entrypoints.config import BuildOptions, HtmlFileConfig
from plugins.html_entrypoints.exceptions import TemplateRenderError
from plugins.html_entrypoints.renderer import (
    DEFAULT_HTML_TEMPLATE,
    apply_title,
    build_asset_tag,
    build_extra_script_tag,
    inject_files_into_html,
    load_template,
    render_template,
)

TEMPLATE = "<html><head><title>App</title></head><body></body></html>"


def make_config(**kwargs):
    kwargs.setdefault("filename", "index.html")
    kwargs.setdefault("entry_points", ["src/app.ts"])
    return HtmlFileConfig(**kwargs)


def make_options(**kwargs):
    kwargs.setdefault("metafile", "meta.json")
    kwargs.setdefault("outdir", "dist")
    return BuildOptions(**kwargs)


class TestLoadTemplate:
    """Choosing between template file, inline text and the default."""

    def test_default_template(self):
        """Test: Default template."""
        assert load_template(None) == DEFAULT_HTML_TEMPLATE
        assert load_template("") == DEFAULT_HTML_TEMPLATE

    def test_inline_template_text(self):
        """Test: Inline template text."""
        assert load_template(TEMPLATE) == TEMPLATE

    def test_template_file(self, tmp_path):
        """Test: Template file."""
        (tmp_path / "template.html").write_text("<p>from file</p>", encoding="utf8")
        assert load_template("template.html", str(tmp_path)) == "<p>from file</p>"


class TestRenderTemplate:
    """Substitution of define values into templates."""

    def test_untouched_without_define(self):
        """Test: Without define the template is returned unchanged."""
        template = "<title>${title} {{ broken </title><% x %>"
        assert render_template(template) == template

    def test_default_template_round_trip(self):
        """Test: Default template round trip."""
        assert render_template(load_template(None)) == DEFAULT_HTML_TEMPLATE

    def test_define_values(self):
        """Test: Define values."""
        out = render_template("<title>{{ define.name }}</title>\n", {"name": "My App"})
        assert out == "<title>My App</title>\n"

    def test_malformed_template_is_fatal(self):
        """Test: Malformed template is fatal."""
        with pytest.raises(TemplateRenderError) as exc:
            render_template("<title>{{ define.name </title>", {"name": "x"})
        assert isinstance(exc.value, PluginError)


class TestApplyTitle:
    """Setting the document title."""

    def test_replaces_existing_title(self):
        """Test: Replaces existing title."""
        assert apply_title(TEMPLATE, "New & Improved") == (
            "<html><head><title>New &amp; Improved</title></head><body></body></html>"
        )

    def test_inserts_title_into_head(self):
        """Test: Inserts title into head."""
        out = apply_title(DEFAULT_HTML_TEMPLATE, "Home")
        assert "<title>Home</title>" in out
        assert out.index("<title>Home</title>") < out.index("</head>")

    def test_no_title_configured(self):
        """Test: No title configured."""
        assert apply_title(DEFAULT_HTML_TEMPLATE, None) == DEFAULT_HTML_TEMPLATE


class TestBuildAssetTag:
    """Markup generated for a single asset."""

    def test_module_script(self):
        """Test: Module script."""
        tag = build_asset_tag({"path": "dist/app.js"}, make_config(script_loading="module"), make_options())
        assert tag == '<script src="app.js" type="module"></script>'
        script = BeautifulSoup(tag, "html.parser").script
        assert script["type"] == "module" and not script.has_attr("defer")

    def test_defer_script(self):
        """Test: Defer script."""
        tag = build_asset_tag({"path": "dist/app.js"}, make_config(script_loading="defer"), make_options())
        assert tag == '<script src="app.js" defer></script>'
        script = BeautifulSoup(tag, "html.parser").script
        assert script.has_attr("defer") and not script.has_attr("type")

    def test_blocking_script(self):
        """Test: Blocking script."""
        tag = build_asset_tag({"path": "dist/app.js"}, make_config(script_loading="blocking"), make_options())
        assert tag == '<script src="app.js"></script>'
        script = BeautifulSoup(tag, "html.parser").script
        assert not script.has_attr("defer") and not script.has_attr("type")

    def test_stylesheet(self):
        """Test: Stylesheet."""
        tag = build_asset_tag({"path": "dist/app.css"}, make_config(), make_options(public_path="/static"))
        assert tag == '<link rel="stylesheet" href="/static/app.css">'

    def test_unknown_extension(self, caplog):
        """Test: Unknown extension."""
        with caplog.at_level(logging.INFO, logger="mkdocs.plugins.html_entrypoints"):
            tag = build_asset_tag({"path": "dist/app.js.map"}, make_config(), make_options(log_level="info"))
        assert tag == ""
        assert "neither .js nor .css" in caplog.text

    def test_unknown_extension_quiet_by_default(self, caplog):
        """Test: Unknown extension quiet by default."""
        with caplog.at_level(logging.INFO, logger="mkdocs.plugins.html_entrypoints"):
            build_asset_tag({"path": "dist/logo.png"}, make_config(), make_options())
        assert caplog.text == ""

    def test_unknown_extension_quiet_when_verbose(self, caplog):
        """Test: Only the info and debug levels report skipped files."""
        with caplog.at_level(logging.INFO, logger="mkdocs.plugins.html_entrypoints"):
            build_asset_tag({"path": "dist/logo.png"}, make_config(), make_options(log_level="verbose"))
        assert caplog.text == ""

    def test_inline_assets(self, tmp_path):
        """Test: Inline assets."""
        (tmp_path / "dist").mkdir()
        (tmp_path / "dist" / "app.js").write_text("console.log(1);", encoding="utf8")
        (tmp_path / "dist" / "app.css").write_text("body{margin:0}", encoding="utf8")
        config = make_config(inline_js=True, inline_css=True)
        options = make_options(base_dir=str(tmp_path))
        assert build_asset_tag({"path": "dist/app.js"}, config, options) == "<script>console.log(1);</script>"
        assert build_asset_tag({"path": "dist/app.css"}, config, options) == "<style>body{margin:0}</style>"

    def test_hash_query(self, tmp_path):
        """Test: Hash query."""
        (tmp_path / "dist").mkdir()
        (tmp_path / "dist" / "app.css").write_bytes(b"body{margin:0}")
        expected = hashlib.sha384(b"body{margin:0}").hexdigest()[:8]
        tag = build_asset_tag({"path": "dist/app.css"}, make_config(hash=True), make_options(base_dir=str(tmp_path)))
        assert tag == f'<link rel="stylesheet" href="app.css?{expected}">'

    def test_literal_hash_query(self):
        """Test: Literal hash query."""
        tag = build_asset_tag({"path": "dist/app.js"}, make_config(hash="v2"), make_options())
        assert tag == '<script src="app.js?v2" defer></script>'


class TestInjectFilesIntoHtml:
    """Splicing asset tags into the rendered template."""

    ASSETS = [{"path": "dist/app.js"}, {"path": "dist/app.css"}]

    def test_injects_after_title(self):
        """Test: Injects after title."""
        out = inject_files_into_html(TEMPLATE, self.ASSETS, make_config(), make_options())
        assert out == (
            "<html><head><title>App</title>"
            '<script src="app.js" defer></script><link rel="stylesheet" href="app.css">'
            "</head><body></body></html>"
        )

    def test_only_first_title(self):
        """Test: Only first title."""
        template = "<title>a</title><svg><title>b</title></svg>"
        out = inject_files_into_html(template, self.ASSETS[:1], make_config(), make_options())
        assert out == '<title>a</title><script src="app.js" defer></script><svg><title>b</title></svg>'

    def test_missing_title_leaves_template_unchanged(self):
        """Test: Templates without </title> are returned unchanged."""
        out = inject_files_into_html(DEFAULT_HTML_TEMPLATE, self.ASSETS, make_config(), make_options())
        assert out == DEFAULT_HTML_TEMPLATE

    def test_favicon_and_extra_scripts(self):
        """Test: Favicon and extra scripts."""
        config = make_config(
            filename="pages/index.html",
            favicon="assets/favicon.ico",
            extra_scripts=["https://example.com/a.js", {"src": "/b.js", "attrs": {"async": "async"}}],
        )
        out = inject_files_into_html(TEMPLATE, self.ASSETS[:1], config, make_options())
        assert (
            '<title>App</title><link rel="icon" href="../favicon.ico">'
            '<script src="../app.js" defer></script>'
            '<script src="https://example.com/a.js"></script>'
            '<script src="/b.js" async="async"></script></head>'
        ) in out

    def test_extra_script_attrs_are_escaped(self):
        """Test: Extra script attrs are escaped."""
        tag = build_extra_script_tag({"src": "/x.js", "attrs": {"data-x": '"quoted"'}})
        assert tag == '<script src="/x.js" data-x="&quot;quoted&quot;"></script>'
