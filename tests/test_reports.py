import csv
import io
import json
import os
import time

import pytest

from seo_toolkit.exceptions import UnsupportedFormatError
from seo_toolkit.services.history import AnalysisHistory, MonitoringState
from seo_toolkit.services.page_scorer import analyze
from seo_toolkit.services.reports import (
    ReportWriter,
    build_health_report,
    build_seo_report,
    check_content_quality,
    cleanup_directory,
    render_analysis,
    score_color,
)

URL = 'https://videogreetings.example.com'


@pytest.fixture
def empty_analysis(empty_page_html):
    return analyze(empty_page_html, URL)


@pytest.fixture
def writer(tmp_path):
    return ReportWriter(str(tmp_path / 'reports'), str(tmp_path / 'alerts'), str(tmp_path / 'logs'))


class TestRendering:

    def test_json(self, empty_analysis):
        data = json.loads(render_analysis(empty_analysis, 'json'))

        assert data['url'] == URL
        assert data['score'] == 0

    def test_html(self, empty_analysis):
        html = render_analysis(empty_analysis, 'html')

        assert '<h1>SEO Analysis Report</h1>' in html
        assert 'Missing meta description' in html
        assert score_color(0) in html

    def test_csv_one_row_per_issue(self, empty_analysis):
        rows = list(csv.reader(io.StringIO(render_analysis(empty_analysis, 'csv'))))

        assert rows[0] == ['URL', 'Section', 'Severity', 'Issue', 'Suggestion']
        assert len(rows) == 1 + len(empty_analysis.issues)
        assert rows[1][:4] == [URL, 'title', 'high', 'Missing page title']

    def test_unsupported_format(self, empty_analysis):
        with pytest.raises(UnsupportedFormatError):
            render_analysis(empty_analysis, 'pdf')

    @pytest.mark.parametrize('score, color', [(95, '#28a745'), (60, '#ffc107'), (10, '#dc3545')])
    def test_score_color(self, score, color):
        assert score_color(score) == color


class TestReportWriter:

    def test_save_analysis(self, writer, empty_analysis):
        path = writer.save_analysis(empty_analysis, 'html')

        assert os.path.dirname(path) == writer.reports_dir
        assert os.path.basename(path).startswith('seo-analysis-')
        assert path.endswith('.html')

    def test_save_analysis_rejects_format(self, writer, empty_analysis):
        with pytest.raises(UnsupportedFormatError):
            writer.save_analysis(empty_analysis, 'xml')
        assert not os.path.exists(writer.reports_dir)

    def test_save_alert_uses_id(self, writer):
        path = writer.save_alert({'id': 'alert-abc', 'message': 'x'})

        assert path == os.path.join(writer.alerts_dir, 'alert-abc.json')

    def test_save_error(self, writer):
        path = writer.save_error('daily', RuntimeError('boom'))

        with open(path, encoding='utf-8') as f:
            entry = json.load(f)
        assert entry['task'] == 'daily'
        assert entry['error'] == {'name': 'RuntimeError', 'message': 'boom'}

    def test_default_directories(self, tmp_path):
        writer = ReportWriter(str(tmp_path))

        assert writer.alerts_dir == os.path.join(str(tmp_path), 'alerts')
        assert writer.logs_dir == os.path.join(str(tmp_path), 'logs')


class TestRetention:

    def test_old_files_removed(self, tmp_path):
        old = tmp_path / 'old.json'
        new = tmp_path / 'new.json'
        old.write_text('{}')
        new.write_text('{}')
        ten_days_ago = time.time() - 10 * 24 * 60 * 60
        os.utime(old, (ten_days_ago, ten_days_ago))

        assert cleanup_directory(str(tmp_path), 7) == ['old.json']
        assert not old.exists()
        assert new.exists()

    def test_missing_directory(self, tmp_path):
        assert cleanup_directory(str(tmp_path / 'absent'), 7) == []


class TestSummaries:

    def test_content_quality(self, full_page_html, empty_page_html, build_page):
        history = AnalysisHistory()
        assert check_content_quality(history)['status'] == 'unknown'

        history.add(analyze(full_page_html, URL))
        assert check_content_quality(history)['status'] == 'good'

        # no images, social tags or structured data: 55
        history.clear()
        history.add(analyze(build_page(images=(), social=False, json_ld=()), URL))
        assert check_content_quality(history) == {'status': 'warning', 'average_score': 55, 'recent_analyses': 1}

        history.add(analyze(empty_page_html, URL))
        assert check_content_quality(history)['status'] == 'poor'

    def test_health_unknown_without_data(self):
        report = build_health_report(AnalysisHistory(), MonitoringState(), ['a.com', 'b.com'])

        assert report['overall_health'] == 'unknown'
        assert report['checks']['competitor_activity']['competitors'] == 2

    def test_health_good_and_warning(self, full_page_html):
        history = AnalysisHistory()
        history.add(analyze(full_page_html, URL))
        state = MonitoringState()
        state.record_ranking('video greetings', {'position': 5})

        assert build_health_report(history, state)['overall_health'] == 'good'

        state.record_ranking('birthday videos', {'position': 40})
        state.record_ranking('gift videos', {'position': 35})
        assert build_health_report(history, state)['overall_health'] == 'warning'

    def test_seo_report(self, full_page_html):
        history = AnalysisHistory()
        run_id = history.add(analyze(full_page_html, URL))
        state = MonitoringState()
        state.add_alert({'id': 'alert-1', 'message': 'x'})

        report = build_seo_report(history, state)

        assert report['summary'] == {
            'total_analyses': 1,
            'average_score': 100,
            'keyword_rankings': 0,
            'active_alerts': 1,
        }
        assert report['recent_analyses'][0]['run_id'] == run_id
        json.dumps(report)
