"""
Report renderer: text/Markdown/HTML/CSV/JSON summaries of an AnalysisResult.
Markdown and HTML are rendered with the Jinja2 templates in report/templates.
"""

import csv
import io
import json
import os
from typing import Any, Dict, List

from jinja2 import Environment, FileSystemLoader, select_autoescape

from estimate.synthesizer import confidence_label

TEMPLATE_DIR = os.path.join(os.path.dirname(__file__), 'templates')

ESTIMATE_CSV_HEADER = ['identifier', 'title', 'suggested_points', 'confidence', 'confidence_label', 'hours', 'hours_min', 'hours_max']
CORRELATION_CSV_HEADER = ['identifier', 'assignee', 'estimate', 'commits', 'prs', 'activity_score', 'velocity_ratio']

FORMATS = ('text', 'md', 'markdown', 'html', 'htm', 'csv', 'json')


def _environment() -> Environment:
    env = Environment(
        loader=FileSystemLoader(TEMPLATE_DIR),
        autoescape=select_autoescape(['html', 'xml', 'html.j2']),
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters['confidence_label'] = confidence_label
    return env


def _user_name(result) -> str:
    return result.user.label if result.user else 'all users'


def _context(result) -> Dict[str, Any]:
    return {
        'result': result,
        'user_name': _user_name(result),
        'generated_at': result.generated_at.isoformat() if result.generated_at else '',
        'scope': result.scope,
    }


def render_text(result) -> str:
    """Render a plain-text summary."""
    lines = [f"Story point analysis for {_user_name(result)}"]
    profile = result.profile
    lines.append(
        f"Velocity: {profile.avg_points_per_day:.1f} pts/day, {profile.avg_time_per_point:.1f} days/pt, "
        f"prefers {profile.complexity_preference} work, accuracy {profile.estimation_accuracy:.2f}"
    )

    lines.append(f"\nEstimates ({len(result.estimates)}):")
    for item in result.estimates:
        est = item.estimate
        lines.append(
            f"  {item.issue.identifier} {item.issue.title}: {est.suggested_points} pts "
            f"({confidence_label(est.confidence)} confidence, ~{est.time_estimate.hours}h)"
        )

    prio = result.prioritization
    lines.append(f"\nRecommended next ({prio.total_effort} pts total):")
    for p in prio.recommended:
        marker = ' [quick win]' if p.quick_win else ''
        lines.append(f"  {p.issue.identifier}: ratio {p.value_effort_ratio:.2f}{marker}")

    lines.append(f"\nCorrelations ({len(result.correlations)}):")
    for c in result.correlations:
        lines.append(f"  {c}")

    insights = list(result.correlation_insights) + list(result.team_recommendations)
    if insights:
        lines.append("\nInsights:")
        for insight in insights:
            lines.append(f"  [{insight.type}] {insight.title}: {insight.description}")
    return "\n".join(lines)


def render_markdown(result) -> str:
    return _environment().get_template('report.md.j2').render(**_context(result))


def render_html(result) -> str:
    return _environment().get_template('report.html.j2').render(**_context(result))


def _write_rows(header: List[str], rows) -> str:
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(header)
    for row in rows:
        writer.writerow(row)
    return output.getvalue()


def render_csv(result) -> str:
    """One row per estimated issue."""
    rows = []
    for item in result.estimates:
        est = item.estimate
        rows.append([
            item.issue.identifier,
            item.issue.title,
            est.suggested_points,
            est.confidence,
            confidence_label(est.confidence),
            est.time_estimate.hours,
            est.time_estimate.min_hours,
            est.time_estimate.max_hours,
        ])
    return _write_rows(ESTIMATE_CSV_HEADER, rows)


def render_correlations_csv(result) -> str:
    """One row per correlated issue; velocity_ratio is empty when undefined."""
    rows = []
    for c in result.correlations:
        rows.append([
            c.issue.identifier,
            c.issue.assignee.label if c.issue.assignee else '',
            c.issue.estimate if c.issue.estimate is not None else '',
            len(c.related_commits),
            len(c.related_prs),
            c.activity_score,
            c.velocity_ratio if c.velocity_ratio is not None else '',
        ])
    return _write_rows(CORRELATION_CSV_HEADER, rows)


def render_json(result) -> str:
    return json.dumps(result.as_dict(), indent=2, sort_keys=True)


def render(result, fmt: str = 'text') -> str:
    """Render `result` in `fmt`; raises ValueError for an unknown format."""
    fmt_l = (fmt or 'text').lower()
    if fmt_l == 'text':
        return render_text(result)
    if fmt_l in ('md', 'markdown'):
        return render_markdown(result)
    if fmt_l in ('html', 'htm'):
        return render_html(result)
    if fmt_l == 'csv':
        return render_csv(result)
    if fmt_l == 'json':
        return render_json(result)
    raise ValueError(f"Unknown report format: {fmt}")
