"""
HTML report assembly.

The page is a fixed template whose [placeholders] are replaced with the
title, generation time and rendered sections. Tables are rendered with
DataFrame.to_html; figures are referenced relative to the report file.
"""

from __future__ import annotations

import html
import os
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

import pandas as pd

TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>[title]</title>
<style>
body { font-family: Helvetica, Arial, sans-serif; margin: 2em auto; max-width: 1100px; color: #222; }
h1 { border-bottom: 2px solid #0081A6; padding-bottom: 0.3em; }
h2 { color: #004976; margin-top: 2em; }
table.report-table { border-collapse: collapse; margin: 1em 0; font-size: 0.9em; }
table.report-table th, table.report-table td { border: 1px solid #ccc; padding: 4px 8px; text-align: right; }
table.report-table th { background: #eef5f8; }
figure { margin: 1em 0; }
figure img { max-width: 100%; }
figcaption, p.note { color: #555; font-size: 0.9em; }
</style>
</head>
<body>
<h1>[title]</h1>
<p class="note">Generated [generated]</p>
[sections]
</body>
</html>
"""


@dataclass
class Section:
    heading: str
    text: str = ""
    tables: list[tuple[str, pd.DataFrame]] = field(default_factory=list)
    figures: list[tuple[str, Path]] = field(default_factory=list)


def render_table(caption: str, df: pd.DataFrame) -> str:
    body = df.to_html(index=False, classes="report-table", border=0, na_rep="", escape=True)
    return f"<h3>{html.escape(caption)}</h3>\n{body}"


def render_figure(caption: str, path: Path, base_dir: Path) -> str:
    rel = Path(os.path.relpath(path, base_dir)).as_posix()
    cap = html.escape(caption)
    return f'<figure><img src="{html.escape(rel)}" alt="{cap}"><figcaption>{cap}</figcaption></figure>'


def render_section(section: Section, base_dir: Path) -> str:
    parts = [f"<h2>{html.escape(section.heading)}</h2>"]
    if section.text:
        parts.append(f"<p>{html.escape(section.text)}</p>")
    parts.extend(render_figure(c, p, base_dir) for c, p in section.figures)
    parts.extend(render_table(c, df) for c, df in section.tables)
    return "\n".join(parts)


def render_report(title: str, sections: list[Section], output_path: Path,
                  generated: datetime | None = None) -> Path:
    """
    Write the HTML report to `output_path` and return it.
    """
    output_path.parent.mkdir(parents=True, exist_ok=True)
    base_dir = output_path.parent
    replacements = {
        "[title]": html.escape(title),
        "[generated]": (generated or datetime.now()).strftime("%Y-%m-%d %H:%M"),
        "[sections]": "\n".join(render_section(s, base_dir) for s in sections),
    }
    page = TEMPLATE
    # sections last so placeholder-like text inside tables is left alone
    for key, value in replacements.items():
        page = page.replace(key, value)
    output_path.write_text(page, encoding="utf-8")
    return output_path
