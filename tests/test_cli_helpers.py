import json
import webbrowser
from pathlib import Path

from cli import _load_json_file, _records, _resolve_user, _write_report_file
from normalize.models import Issue, User


def test_write_report_file_creates_file(tmp_path):
    base = str(tmp_path / 'out_report')
    content = 'hello world'
    _write_report_file(base, 'txt', content, open_html=False)
    p = Path(f"{base}.txt")
    assert p.exists()
    assert p.read_text(encoding='utf-8') == content


def test_write_report_file_keeps_extension(tmp_path):
    path = str(tmp_path / 'nested' / 'report.csv')
    assert _write_report_file(path, 'csv', 'a,b\n') == path
    assert Path(path).exists()


def test_write_report_file_opens_html(monkeypatch, tmp_path):
    # monkeypatch webbrowser.open to capture calls and avoid launching a real browser
    called = {}

    def fake_open(url):
        called['url'] = url
        return True

    monkeypatch.setattr(webbrowser, 'open', fake_open)

    base = str(tmp_path / 'out_report2')
    _write_report_file(base, 'html', '<html><body>ok</body></html>', open_html=True)
    assert Path(f"{base}.html").exists()
    assert called['url'].startswith('file://')


def test_load_json_file_failure(tmp_path, capsys):
    bad = tmp_path / 'bad.json'
    bad.write_text('{not json', encoding='utf-8')
    assert _load_json_file(str(bad), 'issues file') is None
    assert f"Failed to read issues file {bad}" in capsys.readouterr().out


def test_records_unwraps_common_keys():
    assert _records([{'a': 1}]) == [{'a': 1}]
    assert _records({'issues': [{'a': 1}]}) == [{'a': 1}]
    assert _records({'values': [{'b': 2}]}) == [{'b': 2}]
    assert _records({'nothing': 1}) == []
    assert _records(json.loads('"text"')) == []


def test_resolve_user_by_id_email_or_handle():
    alice = User('u1', 'Alice', email='alice@example.com', name='alice')
    issues = [Issue(issue_id='1', identifier='X-1', title='t', assignee=alice)]
    assert _resolve_user(issues, 'u1') is alice
    assert _resolve_user(issues, 'alice@example.com') is alice
    assert _resolve_user(issues, 'alice') is alice
    stranger = _resolve_user(issues, 'nobody')
    assert stranger.user_id == 'nobody'
    assert _resolve_user(issues, '') is None
