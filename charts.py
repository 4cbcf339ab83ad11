"""
Scatter plots of Vertical Scaled Score against Test Scaled Score with the
fitted regression line, one PNG per assessment.
"""

import base64
import logging
from pathlib import Path

import matplotlib
matplotlib.use('Agg')  # Use non-interactive backend (no GUI required)
import matplotlib.pyplot as plt
import numpy as np

logger = logging.getLogger(__name__)

POINT_COLOR = "#0381a2"
LINE_COLOR = "#dc2626"
TEXT_COLOR = "#434343"

plt.rcParams["font.family"] = ["DejaVu Sans", "Arial", "Helvetica", "sans-serif"]


def chart_filename(name):
    safe = "".join(c if c.isalnum() else "_" for c in name).strip("_").lower()
    return f"{safe}_scatter.png"


def plot_assessment(dataset, fit, result, out_dir):
    """
    Draw one assessment's scatter and fitted line, save it under out_dir and
    return the saved path.
    """
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    out_path = out_dir / chart_filename(dataset.name)

    x = dataset.test_scores
    y = dataset.vertical_scores

    fig, ax = plt.subplots(figsize=(8, 6), dpi=100)
    try:
        ax.scatter(x, y, s=14, alpha=0.45, color=POINT_COLOR, edgecolors="none", zorder=2,
                   label=f"Students (n = {len(x)})")

        if len(x):
            xs = np.linspace(x.min(), x.max(), 100)
            ax.plot(xs, fit.forward(xs), color=LINE_COLOR, lw=2, zorder=3, label="Least-squares fit")

        ax.text(
            0.02, 0.97,
            f"VSS = {fit.intercept:.2f} + {fit.slope:.4f} × TSS\nR² = {result['r_sq']:.3f}",
            transform=ax.transAxes, ha="left", va="top", fontsize=10, color=TEXT_COLOR,
        )
        ax.set_title(dataset.name, fontweight="bold", fontsize=14, pad=10)
        ax.set_xlabel("Test Scaled Score")
        ax.set_ylabel("Vertical Scaled Score")
        ax.grid(True, ls="--", lw=0.5, alpha=0.5, zorder=0)
        ax.spines["top"].set_visible(False)
        ax.spines["right"].set_visible(False)
        ax.legend(loc="lower right", frameon=False, fontsize=9)

        fig.tight_layout()
        fig.savefig(out_path, dpi=150, bbox_inches="tight")
    finally:
        plt.close(fig)

    logger.info(f"Saved chart for {dataset.name}: {out_path}")
    return out_path


def encode_png(path):
    """Base64 data URI for embedding a PNG in a self-contained HTML page."""
    data = Path(path).read_bytes()
    return "data:image/png;base64," + base64.b64encode(data).decode("ascii")
