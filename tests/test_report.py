# tests/test_report.py

"""
Report Build Tests - charts, HTML assembly, build_report command
"""

import json

import pytest

import build_report
from charts import chart_filename, encode_png, plot_assessment
from config import ASSESSMENT_NAMES
from regression import fit_assessment
from report import build_html, esc, fmt_num, fmt_p
from scores import AssessmentDataset


@pytest.fixture
def score_csv(tmp_path):
    lines = ["TestName,TestScaledScore,VerticalScale"]
    for name, slope, intercept in [('Grade 3 Reading', 2.0528, 632.98), ('Grade 8 Math', 1.6673, 940.52)]:
        for i, x in enumerate(range(250, 601, 25)):
            noise = 4 if i % 2 == 0 else -4
            lines.append(f"{name},{x},{slope * x + intercept + noise:.2f}")
    lines.append("Grade 8 Math,,1500")
    path = tmp_path / "scores.csv"
    path.write_text("\n".join(lines) + "\n")
    return path


class TestHelpers:

    def test_esc(self):
        assert esc('<b>"A&B"</b>') == '&lt;b&gt;&quot;A&amp;B&quot;&lt;/b&gt;'
        assert esc(None) == ''

    def test_fmt_num(self):
        assert fmt_num(1234.567, 1) == '1,234.6'
        assert fmt_num(None) == '&mdash;'
        assert fmt_num(float('nan')) == '&mdash;'

    def test_fmt_p(self):
        assert fmt_p(0.0001) == '&lt;.001'
        assert fmt_p(0.0423) == '0.042'

    def test_chart_filename(self):
        assert chart_filename('Grade 3 Reading') == 'grade_3_reading_scatter.png'


class TestCharts:

    def test_plot_assessment_writes_png(self, tmp_path, noisy_dataset):
        fit, result = fit_assessment(noisy_dataset)
        path = plot_assessment(noisy_dataset, fit, result, tmp_path / "charts")
        assert path.exists()
        assert path.read_bytes()[:8] == b'\x89PNG\r\n\x1a\n'
        assert encode_png(path).startswith('data:image/png;base64,')


class TestBuildHtml:

    def test_contains_every_assessment(self, datasets):
        entries = build_report.build_entries(datasets)
        html = build_html(entries, generated_on='2026-10-19')
        assert html.startswith('<!DOCTYPE html>')
        for name in ASSESSMENT_NAMES:
            assert f'<h3>{name}</h3>' in html
        assert 'Generated 2026-10-19' in html
        assert '632.98' in html

    def test_conversion_table(self, datasets):
        entries = build_report.build_entries({'Grade 3 Reading': datasets['Grade 3 Reading']})
        html = build_html(entries)
        assert '<tr><td>400</td><td>1454</td></tr>' in html

    def test_boundary_flags_rendered(self):
        ds = AssessmentDataset.from_pairs('Grade 6 <Math>', [(450, 1500), (520, 1650), (640, 1900)])
        html = build_html(build_report.build_entries({ds.name: ds}))
        assert 'Grade 6 &lt;Math&gt;' in html
        assert 'Test Scaled Score(s) above 600' in html
        assert '<Math>' not in html

    def test_no_flags(self, datasets):
        html = build_html(build_report.build_entries(datasets))
        assert 'routes every observed score in the expected direction' in html

    def test_embedded_charts(self, tmp_path, datasets):
        entries = build_report.build_entries({'Grade 8 Math': datasets['Grade 8 Math']}, tmp_path)
        html = build_html(entries)
        assert 'src="data:image/png;base64,' in html


class TestBuildReportCommand:

    def test_main_writes_outputs(self, tmp_path, score_csv):
        out = tmp_path / "out"
        assert build_report.main(['--source', 'csv', '--csv', str(score_csv), '--out', str(out)]) == 0

        assert (out / 'report.html').exists()
        assert (out / 'charts' / 'grade_8_math_scatter.png').exists()

        fits = json.loads((out / 'fits.json').read_text())
        assert list(fits) == ['Grade 3 Reading', 'Grade 8 Math']
        assert fits['Grade 3 Reading']['slope'] == pytest.approx(2.0528, abs=0.01)
        assert fits['Grade 8 Math']['n'] == 15

    def test_main_no_charts(self, tmp_path, score_csv):
        out = tmp_path / "out"
        assert build_report.main(['--csv', str(score_csv), '--out', str(out), '--no-charts', '--source', 'csv']) == 0
        assert not (out / 'charts').exists()

    def test_main_missing_data(self, tmp_path):
        assert build_report.main(['--source', 'csv', '--csv', str(tmp_path / 'nope.csv'), '--out', str(tmp_path)]) == 1

    def test_skips_unfittable_assessment(self):
        datasets = {
            'Grade 3 Math': AssessmentDataset.from_pairs('Grade 3 Math', [(400, 1400)]),
            'Grade 4 Math': AssessmentDataset.from_pairs('Grade 4 Math', [(300, 1200), (400, 1400), (500, 1600)]),
        }
        entries = build_report.build_entries(datasets)
        assert [e['name'] for e in entries] == ['Grade 4 Math']
