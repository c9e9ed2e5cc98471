"""POSIX extended regular expressions (egrep syntax) on top of ``re``.

ERE is mostly a subset of Python's syntax. The translation rejects the
Perl-only extensions so that ``--posix`` patterns behave like egrep, and
rewrites bracket expressions, whose rules differ: ``[:class:]`` names are
expanded and every other character inside brackets is literal.
"""

import re

from ghradmin.core.errors import InvalidPattern


CHARACTER_CLASSES = {
    "alnum": "0-9A-Za-z",
    "alpha": "A-Za-z",
    "ascii": "\\x00-\\x7f",
    "blank": "\\t ",
    "cntrl": "\\x00-\\x1f\\x7f",
    "digit": "0-9",
    "graph": "!-~",
    "lower": "a-z",
    "print": " -~",
    "punct": re.escape("!\"#$%&'()*+,-./:;<=>?@[\\]^_`{|}~"),
    "space": "\\t\\n\\v\\f\\r ",
    "upper": "A-Z",
    "word": "0-9A-Za-z_",
    "xdigit": "0-9A-Fa-f",
}

QUANTIFIERS = "*+?"
INTERVAL = re.compile(r"\{(\d+)(,(\d*))?\}")


def _parse_bracket(pattern: str, start: int) -> tuple[str, int]:
    """Translate the bracket expression opening at ``pattern[start]``.

    Returns the Python character set and the index after the closing ``]``.
    """
    i = start + 1
    negate = False
    if i < len(pattern) and pattern[i] == "^":
        negate = True
        i += 1

    items: list[str] = []
    first = True
    while True:
        if i >= len(pattern):
            raise InvalidPattern(f"missing closing ]: {pattern[start:]!r}")
        c = pattern[i]
        if c == "]" and not first:
            i += 1
            break
        first = False

        if pattern.startswith("[:", i):
            end = pattern.find(":]", i + 2)
            if end < 0:
                raise InvalidPattern(f"invalid character class range: {pattern[i:]!r}")
            name = pattern[i + 2:end]
            if name not in CHARACTER_CLASSES:
                raise InvalidPattern(f"invalid character class range: [:{name}:]")
            items.append(CHARACTER_CLASSES[name])
            i = end + 2
            continue

        if c == "-" and items and i + 1 < len(pattern) and pattern[i + 1] != "]":
            lo = items[-1]
            hi = pattern[i + 1]
            if len(re.sub(r"\\(.)", r"\1", lo)) != 1 or ord(hi) < ord(re.sub(r"\\(.)", r"\1", lo)):
                raise InvalidPattern(f"invalid character class range: {pattern[start:i + 2]!r}")
            items[-1] = f"{lo}-{re.escape(hi)}"
            i += 2
            continue

        items.append(re.escape(c))
        i += 1

    return ("[^" if negate else "[") + "".join(items) + "]", i


def translate(pattern: str) -> str:
    """Translate a POSIX ERE into an equivalent Python regular expression."""
    out: list[str] = []
    i = 0
    repeatable = False  # whether the previous token may take a quantifier
    quantified = False  # whether the previous token was a quantifier

    while i < len(pattern):
        c = pattern[i]

        if c == "\\":
            if i + 1 >= len(pattern):
                raise InvalidPattern("trailing backslash at end of expression")
            nxt = pattern[i + 1]
            if nxt.isalnum():
                raise InvalidPattern(f"invalid escape sequence: \\{nxt}")
            out.append(re.escape(nxt))
            i += 2
            repeatable, quantified = True, False
            continue

        if c == "[":
            charset, i = _parse_bracket(pattern, i)
            out.append(charset)
            repeatable, quantified = True, False
            continue

        if c in QUANTIFIERS or (c == "{" and INTERVAL.match(pattern, i)):
            if quantified:
                raise InvalidPattern(f"invalid nested repetition operator: {pattern[i - 1:i + 1]!r}")
            if not repeatable:
                raise InvalidPattern(f"missing argument to repetition operator: {c!r}")
            if c == "{":
                m = INTERVAL.match(pattern, i)
                out.append(m.group(0))
                i = m.end()
            else:
                out.append(c)
                i += 1
            repeatable, quantified = False, True
            continue

        if c == "(":
            if pattern.startswith("(?", i):
                raise InvalidPattern("missing argument to repetition operator: '?'")
            out.append(c)
            i += 1
            repeatable, quantified = False, False
            continue

        if c == "|":
            out.append(c)
            i += 1
            repeatable, quantified = False, False
            continue

        if c in ")^$.":
            out.append(c)
            i += 1
            repeatable, quantified = c in ").", False
            continue

        # any other character, including an unmatched "{" or "]", is literal
        out.append(re.escape(c))
        i += 1
        repeatable, quantified = True, False

    return "".join(out)


def compile_posix(pattern: str) -> re.Pattern:
    """Compile a POSIX ERE, raising InvalidPattern when it is malformed."""
    translated = translate(pattern)
    try:
        return re.compile(translated)
    except re.error as e:
        raise InvalidPattern(f"{pattern!r} cannot be compiled as regular expression: {e}") from e
