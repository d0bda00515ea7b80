"""
report_renderer.py - Markdown to HTML conversion for rendered reports.

Produces a standalone themed HTML page for browser display and a bare
HTML fragment for pasting into e-mail clients.  Only the markdown shapes
emitted by ``report_formatter`` need to convert cleanly.
"""

import html
import logging
import re

import markdown as md_lib  # type: ignore[import-untyped]

logger = logging.getLogger(__name__)


class ReportRenderer:
    """Renders report markdown into HTML."""

    THEMES = {
        "professional": {
            "bg": "#ffffff",
            "text": "#333333",
            "primary": "#0066cc",
            "border": "#dddddd",
            "header_bg": "#f5f5f5",
            "danger": "#dc2626",
        },
        "minimal": {
            "bg": "#ffffff",
            "text": "#334155",
            "primary": "#64748b",
            "border": "#e2e8f0",
            "header_bg": "#f8fafc",
            "danger": "#dc2626",
        },
    }

    EXTENSIONS = ["extra", "sane_lists"]

    def __init__(self, theme: str = "professional"):
        self._theme = self._get_theme_colors(theme)

    def _get_theme_colors(self, theme: str) -> dict:
        if theme not in self.THEMES:
            logger.warning("Unknown theme %r, using 'professional'", theme)
            return self.THEMES["professional"]
        return self.THEMES[theme]

    def markdown_to_raw_html(self, markdown: str) -> str:
        """Convert report markdown to an HTML fragment (no document wrapper)."""
        return md_lib.markdown(markdown, extensions=self.EXTENSIONS, output_format="html")

    def markdown_to_html(self, markdown: str) -> str:
        """Convert report markdown to a standalone, styled HTML document."""
        body = self.markdown_to_raw_html(markdown)
        title_match = re.search(r"^# (.+)$", markdown, flags=re.MULTILINE)
        title = html.escape(title_match.group(1)) if title_match else "Analytics Report"
        t = self._theme
        return f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{title}</title>
  <style>
    body {{
      font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, 'Helvetica Neue', Arial, sans-serif;
      line-height: 1.6;
      max-width: 960px;
      margin: 0 auto;
      padding: 2rem;
      background: {t["bg"]};
      color: {t["text"]};
    }}
    table {{ width: 100%; border-collapse: collapse; margin: 1rem 0; }}
    th, td {{ padding: 0.5rem; border: 1px solid {t["border"]}; text-align: left; }}
    th {{ background-color: {t["header_bg"]}; }}
    td:last-child {{ text-align: right; }}
    td strong {{ color: {t["danger"]}; }}
    a {{ color: {t["primary"]}; text-decoration: none; }}
    a:hover {{ text-decoration: underline; }}
  </style>
</head>
<body>
{body}
</body>
</html>"""
