"""
HTML Report Builder

Renders property usage results into a single self-contained HTML file
that can be opened in any browser. The template is stored as a string
constant so the package ships no extra data files.
"""
import logging
from datetime import datetime
from pathlib import Path
from typing import List, Dict, Any

from jinja2 import Environment, select_autoescape

from .usage import UsageRecord, SourceKind, UsageState

logger = logging.getLogger(__name__)

_env = Environment(autoescape=select_autoescape(default=True, default_for_string=True))


def build_html_report(records: List[UsageRecord], summary: Dict[str, Any],
                      output_path: Path, account_name: str = "HubSpot") -> Path:
    """
    Build a self-contained HTML property usage report.

    Args:
        records: Usage records, one per property
        summary: Summary dict from output.build_summary
        output_path: Where to write the HTML file
        account_name: Display name shown in the header badge

    Returns:
        Path to the generated HTML file
    """
    template = _env.from_string(HTML_TEMPLATE)
    html = template.render(
        records=records,
        summary=summary,
        kinds=list(SourceKind),
        states=UsageState,
        account_name=account_name.upper(),
        generated=datetime.now().strftime('%Y-%m-%d %H:%M'),
    )

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(html, encoding='utf-8')

    size_kb = output_path.stat().st_size / 1024
    logger.info(f"HTML report: {output_path} ({size_kb:.0f} KB)")
    return output_path


HTML_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>Property Usage - {{ summary.object_type }}</title>
<style>
  body { font-family: -apple-system, Segoe UI, sans-serif; margin: 2rem; color: #2d3e50; }
  .badge { display: inline-block; padding: 2px 8px; border-radius: 10px; font-size: 12px; }
  .account { background: #ff7a59; color: #fff; }
  .present { background: #d6f5e3; }
  .absent { background: #eef1f5; color: #7c98b6; }
  .error { background: #fde0dd; }
  .unchecked { background: #fff4d6; }
  table { border-collapse: collapse; width: 100%; font-size: 13px; }
  th, td { border-bottom: 1px solid #dfe3eb; padding: 6px 8px; text-align: left; vertical-align: top; }
  tr.unused td { background: #fffaf0; }
  .warnings { background: #fde0dd; padding: 8px 12px; border-radius: 4px; }
  .muted { color: #7c98b6; }
</style>
</head>
<body>
<h1>Property Usage <span class="badge account">{{ account_name }}</span></h1>
<p class="muted">Object type: {{ summary.object_type }} &middot; generated {{ generated }}</p>

<p>
  <strong>{{ summary.stats.total_properties }}</strong> properties &middot;
  <strong>{{ summary.stats.used_properties }}</strong> used &middot;
  <strong>{{ summary.stats.unused_properties }}</strong> unused
</p>

{% if summary.warnings %}
<div class="warnings">
  <strong>Some sources could not be scanned:</strong>
  <ul>{% for w in summary.warnings %}<li>{{ w }}</li>{% endfor %}</ul>
</div>
{% endif %}

<table>
  <thead>
    <tr>
      <th>Label</th><th>Internal name</th>
      {% for kind in kinds %}<th>{{ kind.label }}</th>{% endfor %}
      <th>Records</th>
    </tr>
  </thead>
  <tbody>
  {% for r in records %}
    <tr class="{{ 'unused' if r.is_unused else '' }}">
      <td><strong>{{ r.label }}</strong>{% if r.hubspot_defined %} <span class="muted">(HubSpot)</span>{% endif %}</td>
      <td><code>{{ r.property_name }}</code></td>
      {% for kind in kinds %}
      {% set state = r.states[kind] %}
      <td>
        <span class="badge {{ state.value }}">{{ state.value }}</span>
        {% if state == states.PRESENT %}
        <div class="muted">{{ r.provenance.get(kind, []) | join(', ') }}</div>
        {% endif %}
      </td>
      {% endfor %}
      <td>
        {% if r.record_count_error %}<span class="badge error" title="{{ r.record_count_error }}">error</span>
        {% elif r.record_count is not none %}{{ r.record_count }}
        {% else %}<span class="muted">&mdash;</span>{% endif %}
      </td>
    </tr>
  {% endfor %}
  </tbody>
</table>
</body>
</html>
"""
