"""
report.py - Self-contained HTML linking report.

Builds one HTML page with summary statistics, regression tables, range
flags and an embedded scatter chart plus conversion table per assessment.
Every entry passed in is a dict with keys: name, summary, fit, result and
(optionally) chart, a data URI produced by charts.encode_png.
"""

import logging
import os
from datetime import date

from config import REPORT_TITLE, SCALE_BOUNDARY
from regression import significance_stars

logger = logging.getLogger(__name__)

CONVERSION_TABLE_SCORES = [300, 350, 400, 450, 500, 550, 600]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def esc(text):
    """Escape HTML special characters."""
    if text is None:
        return ""
    return str(text).replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;").replace('"', "&quot;")


def fmt_num(val, places=2):
    """Format a number, or an em dash placeholder when missing."""
    if val is None or val != val:
        return "&mdash;"
    return f"{val:,.{places}f}"


def fmt_p(val):
    if val is None or val != val:
        return "&mdash;"
    if val < 0.001:
        return "&lt;.001"
    return f"{val:.3f}"


def anchor(name):
    return "a-" + "".join(c if c.isalnum() else "-" for c in name).strip("-").lower()


def r_color(val):
    """Return CSS color for a correlation / R² magnitude."""
    if val is None:
        return "#94a3b8"
    if val >= 0.8:
        return "#16a34a"
    if val >= 0.6:
        return "#d97706"
    return "#dc2626"


# ---------------------------------------------------------------------------
# CSS
# ---------------------------------------------------------------------------

def build_css():
    """Return the complete CSS stylesheet."""
    return """
* { box-sizing: border-box; margin: 0; padding: 0; }

body {
    font-family: 'Source Serif 4', Georgia, serif;
    background: #faf8f5;
    color: #1a1a1a;
    line-height: 1.65;
    font-size: 16px;
    padding: 2rem 1rem;
}

.container { max-width: 1100px; margin: 0 auto; }

h1, h2, h3 {
    font-family: 'Source Sans 3', 'Segoe UI', sans-serif;
    font-weight: 700;
    line-height: 1.3;
}
h1 { font-size: 2.1rem; margin-bottom: 0.5rem; }
h2 { font-size: 1.5rem; margin: 2.5rem 0 1rem; border-bottom: 2px solid #e2ddd5; padding-bottom: 0.5rem; }
h3 { font-size: 1.2rem; margin: 1.5rem 0 0.75rem; }
p { margin-bottom: 1rem; }

.subtitle { font-size: 1.1rem; color: #5a6474; font-style: italic; margin-bottom: 0.75rem; }
.datestamp { font-family: 'IBM Plex Mono', monospace; font-size: 0.85rem; color: #5a6474; margin-bottom: 2rem; }

table {
    width: 100%;
    border-collapse: collapse;
    margin: 1rem 0 1.5rem;
    font-family: 'IBM Plex Mono', monospace;
    font-size: 0.85rem;
}
th {
    font-family: 'Source Sans 3', sans-serif;
    font-weight: 600;
    background: #1a1a1a;
    color: #faf8f5;
    padding: 0.6rem 0.75rem;
    text-align: left;
    white-space: nowrap;
    font-size: 0.8rem;
    text-transform: uppercase;
}
td { padding: 0.5rem 0.75rem; border-bottom: 1px solid #e2ddd5; }
tr:nth-child(even) td { background: #f3f0ea; }
td.name { font-family: 'Source Sans 3', sans-serif; font-weight: 600; }

.callout { border-left: 4px solid #d97706; background: #fff7ed; padding: 0.75rem 1rem; margin: 1rem 0; }
.callout.green { border-color: #16a34a; background: #f0fdf4; }

.chart { text-align: center; margin: 1rem 0; }
.chart img { max-width: 100%; height: auto; border: 1px solid #e2ddd5; }

.toc { columns: 2; list-style: none; margin-bottom: 1.5rem; }
.toc a { color: #0381a2; text-decoration: none; }

footer { margin-top: 3rem; font-size: 0.8rem; color: #5a6474; border-top: 1px solid #e2ddd5; padding-top: 1rem; }
"""


# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------

def build_header(entries, generated_on):
    n_students = sum(e["summary"]["n"] for e in entries)
    links = "".join(
        f'<li><a href="#{anchor(e["name"])}">{esc(e["name"])}</a></li>' for e in entries
    )
    return f"""
<header>
    <h1>{esc(REPORT_TITLE)}</h1>
    <p class="subtitle">Linear relationship between Test Scaled Scores and Vertical Scaled Scores, by grade and subject</p>
    <p class="datestamp">Generated {esc(generated_on)} &middot; {len(entries)} assessments &middot; {n_students:,} students</p>
    <ul class="toc">{links}</ul>
</header>
"""


def build_summary_table(entries):
    rows = []
    for e in entries:
        s = e["summary"]
        t, v = s["test"], s["vertical"]
        rows.append(f"""
        <tr>
            <td class="name">{esc(e["name"])}</td>
            <td>{s["n"]:,}</td>
            <td>{fmt_num(t["mean"], 1)}</td>
            <td>{fmt_num(t["sd"], 1)}</td>
            <td>{fmt_num(t["min"], 0)}&ndash;{fmt_num(t["max"], 0)}</td>
            <td>{fmt_num(v["mean"], 1)}</td>
            <td>{fmt_num(v["sd"], 1)}</td>
            <td>{fmt_num(v["min"], 0)}&ndash;{fmt_num(v["max"], 0)}</td>
            <td style="color: {r_color(s["r"])}; font-weight: 600;">{fmt_num(s["r"], 3)}</td>
        </tr>""")

    return f"""
<h2>Summary Statistics</h2>
<table>
    <thead>
        <tr>
            <th>Assessment</th>
            <th>n</th>
            <th>TSS Mean</th>
            <th>TSS SD</th>
            <th>TSS Range</th>
            <th>VSS Mean</th>
            <th>VSS SD</th>
            <th>VSS Range</th>
            <th>r</th>
        </tr>
    </thead>
    <tbody>
        {"".join(rows)}
    </tbody>
</table>
"""


def build_regression_table(entries):
    rows = []
    for e in entries:
        r = e["result"]
        rows.append(f"""
        <tr>
            <td class="name">{esc(e["name"])}</td>
            <td>{fmt_num(r["intercept"], 2)}</td>
            <td>{fmt_num(r["intercept_se"], 2)}</td>
            <td>{fmt_num(r["slope"], 4)}</td>
            <td>{fmt_num(r["slope_se"], 4)}</td>
            <td>{fmt_num(r["slope_t"], 2)}</td>
            <td>{fmt_p(r["slope_p"])} {significance_stars(r["slope_p"])}</td>
            <td style="color: {r_color(r["r_sq"])}; font-weight: 600;">{fmt_num(r["r_sq"], 3)}</td>
            <td>{fmt_num(r["rmse"], 1)}</td>
            <td>{r["n"]:,}</td>
        </tr>""")

    return f"""
<h2>Regression of Vertical Scaled Score on Test Scaled Score</h2>
<table>
    <thead>
        <tr>
            <th>Assessment</th>
            <th>Intercept</th>
            <th>SE</th>
            <th>Slope</th>
            <th>SE</th>
            <th>t</th>
            <th>p</th>
            <th>R&sup2;</th>
            <th>RMSE</th>
            <th>n</th>
        </tr>
    </thead>
    <tbody>
        {"".join(rows)}
    </tbody>
</table>
<p>* p &lt; .05, ** p &lt; .01, *** p &lt; .001</p>
"""


def build_range_flags(entries):
    flagged = [(e["name"], w) for e in entries for w in e["summary"]["warnings"]]
    if not flagged:
        return f"""
<h2>Scale Boundary Check</h2>
<div class="callout green">
    All observed Test Scaled Scores are at or below {SCALE_BOUNDARY} and all observed Vertical Scaled Scores
    are above it, so the converter routes every observed score in the expected direction.
</div>
"""
    items = "".join(f"<li><strong>{esc(name)}:</strong> {esc(w)}</li>" for name, w in flagged)
    return f"""
<h2>Scale Boundary Check</h2>
<div class="callout">
    The converter treats any score at or below {SCALE_BOUNDARY} as a Test Scaled Score and anything above it as a
    Vertical Scaled Score. The following observed scores fall on the other side of that boundary:
    <ul>{items}</ul>
</div>
"""


def build_conversion_table(fit):
    cells = "".join(
        f"<tr><td>{score}</td><td>{round(fit.forward(score))}</td></tr>"
        for score in CONVERSION_TABLE_SCORES
    )
    return f"""
<table style="width: auto;">
    <thead><tr><th>Test Scaled Score</th><th>Vertical Scaled Score</th></tr></thead>
    <tbody>{cells}</tbody>
</table>
"""


def build_assessment_section(entry):
    fit = entry["fit"]
    chart = ""
    if entry.get("chart"):
        chart = f'<div class="chart"><img src="{entry["chart"]}" alt="{esc(entry["name"])} scatter plot"></div>'

    return f"""
<section id="{anchor(entry["name"])}">
    <h3>{esc(entry["name"])}</h3>
    <p>VSS = {fit.intercept:.2f} + {fit.slope:.4f} &times; TSS
       &nbsp;&middot;&nbsp; TSS = (VSS &minus; {fit.intercept:.2f}) / {fit.slope:.4f}</p>
    {chart}
    {build_conversion_table(fit)}
</section>
"""


def build_methodology():
    return f"""
<h2>Methodology Notes</h2>
<ul>
    <li><strong>Data:</strong> paired Test Scaled Score and Vertical Scaled Score per student. Rows missing either
        score are excluded.</li>
    <li><strong>Model:</strong> ordinary least squares, Vertical Scaled Score regressed on Test Scaled Score,
        fitted separately for each grade and subject.</li>
    <li><strong>Converter:</strong> scores at or below {SCALE_BOUNDARY} are converted forward with the fitted line;
        scores above {SCALE_BOUNDARY} are converted back with its inverse. Results are rounded to whole points.</li>
    <li><strong>Caveat:</strong> the boundary is fixed rather than derived from each assessment's observed range, and
        out-of-range inputs are converted with the same formula.</li>
</ul>
"""


def build_footer(generated_on):
    return f"""
<footer>
    <p>{esc(REPORT_TITLE)} &middot; Generated programmatically on {esc(generated_on)}</p>
</footer>
"""


# ---------------------------------------------------------------------------
# Assemble full HTML document
# ---------------------------------------------------------------------------

def build_html(entries, generated_on=None):
    generated_on = generated_on or date.today().isoformat()
    parts = [
        "<!DOCTYPE html>",
        '<html lang="en">',
        "<head>",
        '<meta charset="UTF-8">',
        '<meta name="viewport" content="width=device-width, initial-scale=1.0">',
        f"<title>{esc(REPORT_TITLE)}</title>",
        f"<style>{build_css()}</style>",
        "</head>",
        "<body>",
        '<div class="container">',
        build_header(entries, generated_on),
        build_summary_table(entries),
        build_regression_table(entries),
        build_range_flags(entries),
        "<h2>Assessments</h2>",
        *(build_assessment_section(e) for e in entries),
        build_methodology(),
        build_footer(generated_on),
        "</div>",
        "</body>",
        "</html>",
    ]
    return "\n".join(parts)


def write_report(html, path):
    os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(html)

    file_size = os.path.getsize(path)
    logger.info(f"Report written to: {path} ({file_size / 1024:.1f} KB)")
    return path
