'''
slugs.py
Turns free-form tag names into URL-safe slugs, following the slug modes
Jekyll understands (none, raw, default, pretty, ascii, latin).
'''

import re
import unicodedata

SLUGIFY_MODES = ('none', 'raw', 'default', 'pretty', 'ascii', 'latin')

SLUGIFY_RAW_REGEX = re.compile(r'\s+')
SLUGIFY_DEFAULT_REGEX = re.compile(r'[\W_]+')
SLUGIFY_PRETTY_REGEX = re.compile(r"(?:[^\w.~!$&'()+,;=@]|_)+")
# no re.I: case-folding would let the Kelvin sign match 'k'
SLUGIFY_ASCII_REGEX = re.compile(r'[^a-zA-Z0-9]+')


def fold_latin(text: str) -> str:
    """Strip accents from Latin letters ('Café' -> 'Cafe')."""
    decomposed = unicodedata.normalize('NFKD', text)
    return ''.join(c for c in decomposed if not unicodedata.combining(c))


def slugify(name, mode: str = 'default') -> str:
    """
    Slug for a tag name. Lowercased, separator runs collapsed to a single
    '-', no leading or trailing '-'. Unknown modes behave like 'default'.
    """
    if name is None:
        return ''
    name = str(name)
    if mode == 'none':
        return name
    if mode not in SLUGIFY_MODES:
        mode = 'default'

    # ascii and latin filter the original case, then lowercase
    if mode == 'ascii':
        return SLUGIFY_ASCII_REGEX.sub('-', name).strip('-').lower()
    if mode == 'latin':
        return SLUGIFY_ASCII_REGEX.sub('-', fold_latin(name)).strip('-').lower()

    # lowercase first so the result is stable under a second pass
    name = name.lower()
    if mode == 'raw':
        slug = SLUGIFY_RAW_REGEX.sub('-', name)
    elif mode == 'pretty':
        slug = SLUGIFY_PRETTY_REGEX.sub('-', name)
    else:
        slug = SLUGIFY_DEFAULT_REGEX.sub('-', name)

    return slug.strip('-')
