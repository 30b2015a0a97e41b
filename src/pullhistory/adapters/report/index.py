"""Static HTML index listing every tracked entity."""

from collections.abc import Iterable, Mapping
from pathlib import Path

from jinja2 import Template

from pullhistory.core.aggregation import is_group_entity
from pullhistory.core.models import EntityCount

DOCKERHUB_WEB_URL = "https://hub.docker.com/r/"

INDEX_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{{ title }}</title>
  <style>
    body { font-family: sans-serif; display: flex; gap: 40px; margin: 20px; }
    table { border-collapse: collapse; }
    caption { font-weight: bold; padding: 8px; }
    th, td { padding: 4px 12px; text-align: left; }
    tr:nth-child(even) { background: #f2f2f2; }
    td.count { text-align: right; }
  </style>
</head>
<body>
{% for caption, rows in tables %}
  <table>
    <caption>{{ caption }}</caption>
    <thead>
      <tr><th>Image</th><th>Last count</th><th>Chart</th></tr>
    </thead>
    <tbody>
    {% for row in rows %}
      <tr>
        <td>{% if row.url %}<a href="{{ row.url }}">{{ row.name }}</a>{% else %}{{ row.name }}{% endif %}</td>
        <td class="count">{{ row.count }}</td>
        <td>{% if row.chart %}<a href="{{ row.chart }}">chart</a>{% endif %}</td>
      </tr>
    {% endfor %}
    </tbody>
  </table>
{% endfor %}
</body>
</html>
"""


def human_count(count: int) -> str:
    """Format a count with thousands separators (e.g., 1234567 -> "1,234,567")."""
    return f"{count:,}"


def _row(entity: EntityCount, chart_links: Mapping[str, str]) -> dict[str, str | None]:
    return {
        "name": entity.name,
        "count": human_count(entity.count),
        "url": None if is_group_entity(entity.name) else DOCKERHUB_WEB_URL + entity.name,
        "chart": chart_links.get(entity.name),
    }


def render_index(
    entities: Iterable[EntityCount],
    chart_links: Mapping[str, str],
    title: str = "Docker pull counts",
) -> str:
    """Render the index page.

    Images and groups are listed in separate tables, each sorted by latest
    count descending.
    """
    ordered = sorted(entities, key=lambda e: e.count, reverse=True)
    images = [_row(e, chart_links) for e in ordered if not is_group_entity(e.name)]
    groups = [_row(e, chart_links) for e in ordered if is_group_entity(e.name)]
    template = Template(INDEX_TEMPLATE, autoescape=True)
    return template.render(title=title, tables=[("IMAGES", images), ("SUMS", groups)])


def write_index(
    out_path: Path,
    entities: Iterable[EntityCount],
    chart_links: Mapping[str, str],
) -> Path:
    """Render the index page and write it to out_path."""
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(render_index(entities, chart_links), encoding="utf-8")
    return out_path
