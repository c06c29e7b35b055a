'''
site_source.py
Reads a Jekyll source tree (posts + layouts) into the inputs the tag page
generator needs, and writes generated pages back as front-matter stubs
that Jekyll renders on its next build.
'''

import os
import re
from datetime import date, datetime

import frontmatter
import pytz
import yaml

from tag_generator import Layout

GENERATED_BY = 'tag_generator'
POST_FILENAME_DATE = re.compile(r'^(\d{4})-(\d{2})-(\d{2})-')


class Post:
    def __init__(self, path, metadata):
        self.path = path
        self.metadata = metadata

    @property
    def title(self):
        return self.metadata.get('title') or os.path.splitext(os.path.basename(self.path))[0]

    def __repr__(self):
        return f"Post({self.path!r})"


def post_tags(metadata: dict) -> list:
    """
    Tags as Jekyll reads them: the singular 'tag' comes first and is taken
    whole; 'tags' may be a YAML list or a whitespace separated string.
    """
    tags = []
    for key in ('tag', 'tags'):
        value = metadata.get(key)
        if value is None:
            continue
        if isinstance(value, str):
            value = value.split() if key == 'tags' else [value]
        elif not isinstance(value, (list, tuple)):
            value = [value]
        for tag in value:
            tag = str(tag).strip()
            if tag and tag not in tags:
                tags.append(tag)
    return tags


def post_date(path, metadata):
    """Front-matter 'date', else the YYYY-MM-DD- prefix of the file name."""
    value = metadata.get('date')
    if isinstance(value, (date, datetime)):
        return value
    match = POST_FILENAME_DATE.match(os.path.basename(path))
    if match:
        try:
            return date(*map(int, match.groups()))
        except ValueError:
            return None
    return None


def is_future(value, now) -> bool:
    if value is None:
        return False
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value > now.replace(tzinfo=None)
        return value > now
    return value > now.date()


def iter_files(root):
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames.sort()
        for filename in sorted(filenames):
            if filename.startswith('.'):
                continue
            yield os.path.join(dirpath, filename)


def read_front_matter(path):
    try:
        return frontmatter.load(path)
    except (yaml.YAMLError, UnicodeDecodeError, ValueError) as e:
        print(f"⚠️ Skipping {path}: {e}")
        return None


def read_tag_index(posts_dir, now=None, future=False) -> dict:
    """
    Tag name -> posts carrying it, in first-seen order. Like Jekyll with
    future: false, posts dated after `now` are left out unless `future`.
    """
    if now is None:
        now = datetime.now(pytz.utc)
    tag_index = {}
    if not os.path.isdir(posts_dir):
        print(f"[WARN] Posts folder not found: {posts_dir}")
        return tag_index

    for path in iter_files(posts_dir):
        doc = read_front_matter(path)
        if doc is None:
            continue
        if doc.metadata.get('published') is False:
            continue
        if not future and is_future(post_date(path, doc.metadata), now):
            continue
        post = Post(path, dict(doc.metadata))
        for tag in post_tags(post.metadata):
            tag_index.setdefault(tag, []).append(post)
    return tag_index


def read_layouts(layouts_dir) -> dict:
    """Layout name (file stem) -> Layout with its front-matter defaults."""
    layouts = {}
    if not os.path.isdir(layouts_dir):
        return layouts

    for path in iter_files(layouts_dir):
        doc = read_front_matter(path)
        if doc is None:
            continue
        name = os.path.splitext(os.path.relpath(path, layouts_dir))[0].replace(os.sep, '/')
        layouts[name] = Layout(name=name, data=dict(doc.metadata), content=doc.content)
    return layouts


def render_stub(page) -> str:
    front = {'layout': page.layout_name}
    front.update(page.metadata)
    front['permalink'] = page.url
    front['generated_by'] = GENERATED_BY
    return '---\n' + yaml.safe_dump(front, sort_keys=False, allow_unicode=True) + '---\n'


def is_generated(path) -> bool:
    doc = read_front_matter(path)
    return doc is not None and doc.metadata.get('generated_by') == GENERATED_BY


def write_pages(descriptors, dest) -> list:
    """
    Write each page under dest. Later pages overwrite earlier ones on the
    same path; files this tool did not write are never overwritten.
    """
    root = os.path.realpath(dest)
    written = []
    for page in descriptors:
        if 'slug' in page.metadata and not page.metadata['slug']:
            print(f"⚠️ Skipping tag {page.metadata.get('tag')!r}: empty slug")
            continue
        target = os.path.realpath(os.path.join(root, page.output_path))
        if os.path.commonpath([root, target]) != root:
            print(f"⚠️ Refusing to write outside the site: {page.output_path}")
            continue
        if os.path.exists(target) and not is_generated(target):
            print(f"⚠️ Keeping hand-written {page.output_path}")
            continue
        os.makedirs(os.path.dirname(target), exist_ok=True)
        with open(target, 'w', encoding='utf8') as f:
            f.write(render_stub(page))
        written.append(target)
    return written


def clean_pages(dest, tag_dir) -> int:
    """Remove stubs this tool wrote earlier. Hand-written pages are left alone."""
    base = os.path.join(dest, tag_dir)
    if not os.path.isdir(base):
        return 0

    removed = 0
    for dirpath, _dirnames, filenames in os.walk(base, topdown=False):
        if 'index.html' in filenames:
            path = os.path.join(dirpath, 'index.html')
            if is_generated(path):
                os.remove(path)
                removed += 1
        if dirpath != base and not os.listdir(dirpath):
            os.rmdir(dirpath)
    return removed
