#!/usr/bin/env python3
"""
Build the scale linking report.

Loads paired scores, fits one regression per assessment, writes charts,
the self-contained HTML report and fits.json (the slope/intercept pairs the
converter uses) to the output directory.
"""

import argparse
import json
import logging
import os
import sys

from config import (
    FITS_FILENAME, REPORT_DIR, REPORT_FILENAME,
    SCORE_CSV_PATH, SCORE_DATA_SOURCE,
)
from charts import encode_png, plot_assessment
from regression import fit_assessment
from report import build_html, write_report
from scores import DatasetError, load_assessment_datasets, ordered_assessment_names
from summary import summarize_assessment

logger = logging.getLogger(__name__)


def build_entries(datasets, chart_dir=None):
    """Fit, summarize and (optionally) chart every assessment."""
    entries = []
    for name in ordered_assessment_names(datasets):
        dataset = datasets[name]
        try:
            fit, result = fit_assessment(dataset)
        except ValueError as e:
            logger.warning(f"Skipping {name}: {e}")
            continue

        entry = {
            'name': name,
            'summary': summarize_assessment(dataset),
            'fit': fit,
            'result': result,
        }
        if chart_dir:
            entry['chart'] = encode_png(plot_assessment(dataset, fit, result, chart_dir))
        entries.append(entry)
    return entries


def fits_payload(entries):
    return {
        e['name']: {
            'slope': e['fit'].slope,
            'intercept': e['fit'].intercept,
            'n': e['result']['n'],
            'r_sq': e['result']['r_sq'],
        }
        for e in entries
    }


def build_report(source=SCORE_DATA_SOURCE, csv_path=SCORE_CSV_PATH, out_dir=REPORT_DIR, charts=True):
    """Run the full build and return the report path."""
    datasets = load_assessment_datasets(source, csv_path)
    entries = build_entries(datasets, os.path.join(out_dir, 'charts') if charts else None)

    report_path = write_report(build_html(entries), os.path.join(out_dir, REPORT_FILENAME))

    fits_path = os.path.join(out_dir, FITS_FILENAME)
    with open(fits_path, 'w', encoding='utf-8') as f:
        json.dump(fits_payload(entries), f, indent=2)
    logger.info(f"Fits written to: {fits_path}")

    return report_path


def main(argv=None):
    parser = argparse.ArgumentParser(description="Build the Test Scaled Score / Vertical Scaled Score linking report")
    parser.add_argument('--source', choices=['csv', 'bigquery'], default=SCORE_DATA_SOURCE,
                        help="Where to read paired scores from")
    parser.add_argument('--csv', default=SCORE_CSV_PATH, help="Path to the score CSV export")
    parser.add_argument('--out', default=REPORT_DIR, help="Output directory")
    parser.add_argument('--no-charts', action='store_true', help="Skip chart generation")
    args = parser.parse_args(argv)

    try:
        path = build_report(args.source, args.csv, args.out, charts=not args.no_charts)
    except DatasetError as e:
        logger.error(f"Report build failed: {e}")
        return 1

    print(f"Report written to: {path}")
    return 0


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO)
    sys.exit(main())
