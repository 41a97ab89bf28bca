import json
from pathlib import Path

import pytest

import cli
from cli import main

LINEAR_ISSUES = {
    'nodes': [
        {
            'id': 'i1',
            'identifier': 'ENG-1',
            'title': 'Refactor billing database',
            'estimate': 5,
            'priority': 2,
            'assignee': {'id': 'u1', 'name': 'alice', 'displayName': 'Alice', 'email': 'alice@example.com'},
            'team': {'id': 't1', 'key': 'ENG'},
            'state': {'name': 'Done', 'type': 'completed'},
            'createdAt': '2025-03-01T00:00:00Z',
            'updatedAt': '2025-03-04T00:00:00Z',
            'completedAt': '2025-03-04T00:00:00Z',
        },
        {
            'id': 'i2',
            'identifier': 'ENG-2',
            'title': 'Billing export to <csv>',
            'priority': 3,
            'assignee': {'id': 'u1', 'name': 'alice', 'displayName': 'Alice', 'email': 'alice@example.com'},
            'team': {'id': 't1', 'key': 'ENG'},
            'state': {'name': 'Todo', 'type': 'unstarted'},
            'createdAt': '2025-03-02T00:00:00Z',
            'updatedAt': '2025-03-02T00:00:00Z',
        },
    ]
}

GITHUB_COMMITS = [
    {
        'sha': 'abc123',
        'commit': {'message': 'ENG-2 first cut', 'author': {'name': 'Alice', 'email': 'alice@example.com', 'date': '2025-03-03T00:00:00Z'}},
        'author': {'login': 'alice'},
    }
]

GITHUB_PULLS = [
    {'number': 4, 'title': 'ENG-2 export', 'user': {'login': 'alice'}, 'state': 'open', 'created_at': '2025-03-03T00:00:00Z'}
]


@pytest.fixture
def inputs(tmp_path, monkeypatch):
    # the CLI configures stderr logging; keep test runs free of global handlers
    monkeypatch.setattr(cli, 'setup_logger', lambda *a, **k: None)
    issues = tmp_path / 'issues.json'
    issues.write_text(json.dumps(LINEAR_ISSUES), encoding='utf-8')
    commits = tmp_path / 'commits.json'
    commits.write_text(json.dumps(GITHUB_COMMITS), encoding='utf-8')
    pulls = tmp_path / 'pulls.json'
    pulls.write_text(json.dumps(GITHUB_PULLS), encoding='utf-8')
    return tmp_path, str(issues), str(commits), str(pulls)


def test_cli_json_to_stdout(inputs, capsys):
    _, issues, commits, pulls = inputs
    code = main(['--issues', issues, '--commits', commits, '--pulls', pulls, '--user', 'alice', '--output', 'json'])
    assert code == 0
    data = json.loads(capsys.readouterr().out)
    assert [e['issue']['identifier'] for e in data['estimates']] == ['ENG-2']
    correlated = {c['identifier']: c for c in data['correlations']}
    assert correlated['ENG-2']['activity_score'] == 3
    assert data['user']['user_id'] == 'u1'


def test_cli_export_all(inputs):
    tmp_path, issues, commits, pulls = inputs
    base = str(tmp_path / 'out' / 'report')
    code = main(['--issues', issues, '--commits', commits, '--pulls', pulls, '--user', 'u1', '--export-all', '--out-file', base])
    assert code == 0
    for ext in ('html', 'md', 'csv', 'json'):
        assert Path(f"{base}.{ext}").exists()
    assert Path(f"{base}_correlations.csv").exists()
    assert '&lt;csv&gt;' in Path(f"{base}.html").read_text(encoding='utf-8')


def test_cli_html_with_open(inputs, monkeypatch):
    tmp_path, issues, _, _ = inputs
    opened = []
    monkeypatch.setattr(cli, '_open_file_in_browser', lambda path: opened.append(path))
    out = str(tmp_path / 'single.html')
    assert main(['--issues', issues, '--output', 'html', '--out-file', out, '--open']) == 0
    assert opened == [out]


def test_cli_preset_and_team(inputs, capsys):
    _, issues, _, _ = inputs
    assert main(['--issues', issues, '--user', 'alice', '--team', 'ENG', '--preset', 'quarterly', '--output', 'json']) == 0
    data = json.loads(capsys.readouterr().out)
    assert data['scope']['team'] == 'ENG'
    assert data['scope']['lookback_days'] == 90


def test_cli_unreadable_issues_file(inputs, capsys):
    tmp_path, _, _, _ = inputs
    missing = str(tmp_path / 'missing.json')
    assert main(['--issues', missing]) == 1
    assert f"Failed to read issues file {missing}" in capsys.readouterr().out


def test_cli_unknown_preset_errors(inputs):
    _, issues, _, _ = inputs
    with pytest.raises(SystemExit):
        main(['--issues', issues, '--preset', 'nope'])
