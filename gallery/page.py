from __future__ import annotations

from jinja2 import Environment

from common.types import SortKey
from gallery.controller import GalleryView


_jinja_env = Environment(autoescape=True, trim_blocks=True, lstrip_blocks=True)

PAGE = _jinja_env.from_string("""<!doctype html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>{{ title }}</title>
<style>
  body { font-family: system-ui, sans-serif; margin: 0; background: #f4f5f7; color: #1d2330; }
  header { display: flex; gap: 2rem; align-items: center; padding: 1rem 2rem; background: #fff; border-bottom: 1px solid #dde1e7; }
  .stat span { font-weight: 600; }
  #cardGrid { display: grid; grid-template-columns: repeat(auto-fill, minmax(260px, 1fr)); gap: 1rem; padding: 2rem; }
  .card { background: #fff; border-radius: 8px; overflow: hidden; box-shadow: 0 1px 3px rgba(0,0,0,.08); }
  .card img { width: 100%; height: 180px; object-fit: cover; display: block; }
  .card-body { padding: .75rem 1rem; }
  .card-title { display: flex; justify-content: space-between; gap: .5rem; font-weight: 600; }
  .badge { font-size: .75rem; background: #e6eefc; color: #2a5bd7; border-radius: 4px; padding: .1rem .4rem; }
  .card-meta { font-size: .85rem; color: #5a6475; margin-top: .5rem; word-break: break-all; }
  .card-meta span { color: #1d2330; }
  .size-unknown { color: #a0a7b4; }
  #error { color: #b42318; padding: 0 2rem; }
  #loading { padding: 0 2rem; }
</style>
</head>
<body>
<header>
  <h1>{{ title }}</h1>
  <div class="stat">Assets: <span id="assetCount">{{ view.stats.asset_count }}</span></div>
  <div class="stat">Total size: <span id="totalSize">{{ view.stats.total_size }}</span></div>
  <form method="get">
    <label for="sortSelect">Sort</label>
    <select id="sortSelect" name="sort" onchange="this.form.submit()">
    {% for key in sort_keys %}
      <option value="{{ key.value }}"{% if key == view.sort_key %} selected{% endif %}>{{ key.label }}</option>
    {% endfor %}
    </select>
    <noscript><button type="submit">Apply</button></noscript>
  </form>
</header>
{% if view.is_loading %}<p id="loading">{{ view.loading_message }}</p>{% endif %}
{% if view.error %}<p id="error">{{ view.error }}</p>{% endif %}
<main id="cardGrid">
{% if view.empty_message %}
  <p>{{ view.empty_message }}</p>
{% endif %}
{% for card in view.cards %}
  <article class="card">
    {% if card.thumbnail %}<img src="{{ card.thumbnail }}" alt="Asset thumbnail" loading="lazy">{% endif %}
    <div class="card-body">
      <div class="card-title"><span>{{ card.title }}</span><span class="badge">{{ card.badge }}</span></div>
      <div class="card-meta">
        <div>Date: <span>{{ card.date }}</span></div>
        <div>Provider: <span>{{ card.provider }}</span></div>
        <div>Resolution: <span>{{ card.resolution }}</span></div>
        <div>File size: <span{% if not card.size_known %} class="size-unknown"{% endif %}>{{ card.file_size }}</span></div>
        {% if card.uuid_href %}
        <div>UUID: <a href="{{ card.uuid_href }}" target="_blank" rel="noopener noreferrer">{{ card.uuid }}</a></div>
        {% else %}
        <div>UUID: <span>{{ card.uuid }}</span></div>
        {% endif %}
      </div>
    </div>
  </article>
{% endfor %}
</main>
</body>
</html>
""")


def render_page(view: GalleryView, title: str = "OpenAerialMap Gallery") -> str:
    return PAGE.render(view=view, title=title, sort_keys=list(SortKey))
