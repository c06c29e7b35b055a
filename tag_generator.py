#!/usr/bin/env python

'''
tag_generator.py
Purpose: Builds one listing page per tag found in the site's posts.
Each page lands at tag/<slug>/index.html and is rendered by the site's
"tag" layout. Sites without a "tag" layout get no tag pages.
'''

import os
from dataclasses import dataclass, field
from datetime import datetime

import pytz

from slugs import slugify

# ─── Config ───────────────────────────────────────────────────────────────────
SITE_SOURCE  = os.environ.get('SITE_SOURCE', '.')
POSTS_DIR    = os.environ.get('POSTS_DIR', '_posts')
LAYOUTS_DIR  = os.environ.get('LAYOUTS_DIR', '_layouts')
TAG_DIR      = os.environ.get('TAG_DIR', 'tag')
SLUGIFY_MODE = os.environ.get('SLUGIFY_MODE', 'default')
SITE_TZ      = os.environ.get('SITE_TZ', 'UTC')
FUTURE       = os.environ.get('FUTURE', '').lower() in ('1', 'true', 'yes')

TAG_LAYOUT = 'tag'
PAGE_NAME  = 'index.html'
TITLE_FORMAT = 'Posts tagged with "%s"'


@dataclass
class Layout:
    name: str
    data: dict = field(default_factory=dict)
    content: str = ''


@dataclass
class PageDescriptor:
    output_path: str
    layout_name: str
    metadata: dict = field(default_factory=dict)

    @property
    def dir(self) -> str:
        return os.path.dirname(self.output_path)

    @property
    def url(self) -> str:
        return '/' + self.dir.replace(os.sep, '/').strip('/') + '/'


def merge_layout_defaults(layout, metadata: dict) -> dict:
    """
    Layout front matter first, page fields on top. The layout's own
    'layout' key is dropped; the descriptor names its layout itself.
    """
    merged = {k: v for k, v in (layout.data or {}).items() if k != 'layout'}
    merged.update(metadata)
    return merged


def generate(tag_index, layout_registry, tag_dir=TAG_DIR, slug_mode=SLUGIFY_MODE):
    if TAG_LAYOUT not in layout_registry:
        return []
    layout = layout_registry[TAG_LAYOUT]

    pages = []
    for tag, _posts in tag_index.items():
        slug = slugify(tag, slug_mode)
        metadata = {
            'tag': tag,
            'title': TITLE_FORMAT % tag,
            'slug': slug,
        }
        pages.append(PageDescriptor(
            output_path=os.path.join(tag_dir, slug, PAGE_NAME),
            layout_name=TAG_LAYOUT,
            metadata=merge_layout_defaults(layout, metadata),
        ))
    return pages


def register(pages: list, descriptors) -> list:
    """Append-only hand-off to the site's page collection."""
    pages.extend(descriptors)
    return pages


def find_collisions(descriptors) -> dict:
    """output_path -> tags, for every path claimed by more than one tag."""
    claimed = {}
    for page in descriptors:
        claimed.setdefault(page.output_path, []).append(page.metadata['tag'])
    return {path: tags for path, tags in claimed.items() if len(tags) > 1}


def site_timezone(name: str):
    try:
        return pytz.timezone(name)
    except pytz.UnknownTimeZoneError:
        print(f"[WARN] Unknown SITE_TZ '{name}', falling back to UTC")
        return pytz.utc


# ─── Main ─────────────────────────────────────────────────────────────────────
def main() -> int:
    import site_source

    tz  = site_timezone(SITE_TZ)
    now = datetime.now(tz)
    print(f"[START] {now.strftime('%Y-%m-%d %H:%M:%S %Z')} | source={os.path.abspath(SITE_SOURCE)}")

    # 1. Layouts first: without a tag layout there is nothing to do
    layouts = site_source.read_layouts(os.path.join(SITE_SOURCE, LAYOUTS_DIR))
    if TAG_LAYOUT not in layouts:
        print(f"[SKIP] No '{TAG_LAYOUT}' layout in {LAYOUTS_DIR}/, tag pages disabled")
        return 0

    # 2. Tag index from post front matter
    tag_index = site_source.read_tag_index(os.path.join(SITE_SOURCE, POSTS_DIR), now, FUTURE)
    print(f"[INFO] Tags={len(tag_index)} | Layouts={len(layouts)}")

    # 3. Synthesize pages
    descriptors = generate(tag_index, layouts, TAG_DIR, SLUGIFY_MODE)
    for path, tags in find_collisions(descriptors).items():
        print(f"[WARN] {path} claimed by {tags}; last one wins")

    # 4. Replace old stubs so removed tags leave no dead pages
    removed = site_source.clean_pages(SITE_SOURCE, TAG_DIR)
    written = site_source.write_pages(register([], descriptors), SITE_SOURCE)

    print(f"✅ Success: {len(written)} tag pages written to /{TAG_DIR} ({removed} stale removed)")
    print(f"[DONE] {datetime.now(tz).strftime('%H:%M:%S')}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
