"""Line normalization.

Log lines of two runs of the same job rarely match byte for byte: they carry
timestamps, pids, durations, temporary paths and random identifiers. The
tokenizer replaces those variable parts with fixed placeholder words so that
the hashing vectorizer only sees the stable structure of a line.
"""

import re


# Order matters: the broader patterns must run before the number mask.
MASKS: list[tuple[str, re.Pattern]] = [
    ('', re.compile(r'\x1b\[[0-9;]*[A-Za-z]')),
    ('%URL', re.compile(r'\b[a-z][a-z0-9+.-]*://\S+', re.IGNORECASE)),
    ('%DATE', re.compile(r'\b\d{4}-\d{2}-\d{2}(?=[T ]|\b)')),
    ('%DATE', re.compile(r'\b(?:Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)\s+\d{1,2}\b')),
    ('%TIME', re.compile(r'(?<!\d)\d{1,2}:\d{2}:\d{2}(?:[.,]\d+)?(?:Z|[+-]\d{2}:?\d{2})?')),
    ('%UUID', re.compile(r'\b[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}\b', re.IGNORECASE)),
    ('%IP', re.compile(r'\b(?:\d{1,3}\.){3}\d{1,3}(?::\d+)?\b')),
    ('%HASH', re.compile(r'\b0x[0-9a-f]+\b', re.IGNORECASE)),
    ('%HASH', re.compile(r'\b(?=[0-9a-f]*\d)(?=[0-9a-f]*[a-f])[0-9a-f]{8,}\b', re.IGNORECASE)),
    ('%NUM', re.compile(r'(?<![A-Za-z])[-+]?\d+(?:\.\d+)?')),
]

_SPACES = re.compile(r'\s+')


def tokenize(line: str) -> str:
    """Return the normalized form of a raw log line.

    Args:
        line: Raw line, without its line terminator

    Returns:
        The line with variable parts masked and whitespace collapsed.
        An empty string means the line carries no information.
    """
    for placeholder, pattern in MASKS:
        line = pattern.sub(f' {placeholder} ' if placeholder else '', line)
    return _SPACES.sub(' ', line).strip()
