"""Ordered tag list <-> flat tag mapping codec.

The object store only keeps a flat key/value tag set per object, so an
ordered list of tags is stored as ``{'tag-0': t0, 'tag-1': t1, ...}``.
"""

import re
from collections.abc import Mapping, Sequence
from typing import Final

TAG_KEY_PREFIX: Final = 'tag-'

_TAG_KEY_PATTERN: Final = re.compile(r'tag-[0-9]+')


def encode_tags(tags: Sequence[str]) -> dict[str, str]:
    """Encode an ordered tag list as a flat tag mapping.

    Tag text is stored verbatim, an empty list encodes to ``{}``.

    Args:
        tags: Tags in display order.

    Returns:
        Mapping with ``tag-<position>`` keys, in position order.
    """
    return {
        f'{TAG_KEY_PREFIX}{position}': tag
        for position, tag in enumerate(tags)
    }


def decode_tags(tag_map: Mapping[str, object]) -> list[str]:
    """Decode a backend tag mapping into a tag list.

    Keys are discarded and the result follows the mapping's iteration
    order, so any flat string mapping is accepted. Empty values are
    dropped unless they sit under a ``tag-<int>`` key written by
    :func:`encode_tags`.

    Args:
        tag_map: Tag mapping as returned by the object store.

    Returns:
        Tag values.
    """
    return [
        tag_value
        for tag_key, tag_value in tag_map.items()
        if isinstance(tag_value, str)
        and (tag_value or _TAG_KEY_PATTERN.fullmatch(tag_key))
    ]
