import enum
import logging
import string

logger = logging.getLogger(__name__)

# Character classes of the C locale; version strings are compared bytewise
_DIGITS = frozenset(string.digits)
_LETTERS = frozenset(string.ascii_letters)
_ALNUM = _DIGITS | _LETTERS


class VersionOrder(enum.IntEnum):
    """Result of comparing version a against version b, from a's perspective."""
    OLDER = -1
    EQUAL = 0
    NEWER = 1


def _sign(value: int) -> int:
    return (value > 0) - (value < 0)


def compare_segments(a: str, b: str) -> int:
    """
    Compares two version fragments the way pacman's rpmvercmp does.
    Returns: -1 if a < b, 0 if a == b, 1 if a > b

    Runs of digits compare numerically, runs of letters bytewise; a numeric
    run beats an alpha run, and a trailing alpha run ('1.0rc') is older than
    nothing at all ('1.0').
    """
    if a == b:
        return 0

    len1, len2 = len(a), len(b)
    one = two = 0  # start of the current segment
    ptr1 = ptr2 = 0  # end of the previous segment

    while one < len1 and two < len2:
        while one < len1 and a[one] not in _ALNUM: one += 1
        while two < len2 and b[two] not in _ALNUM: two += 1

        if not (one < len1 and two < len2):
            break

        # Separator runs of different length decide on their own
        if (one - ptr1) != (two - ptr2):
            return -1 if (one - ptr1) < (two - ptr2) else 1

        ptr1, ptr2 = one, two
        if a[ptr1] in _DIGITS:
            while ptr1 < len1 and a[ptr1] in _DIGITS: ptr1 += 1
            while ptr2 < len2 and b[ptr2] in _DIGITS: ptr2 += 1
            isnum = True
        else:
            while ptr1 < len1 and a[ptr1] in _LETTERS: ptr1 += 1
            while ptr2 < len2 and b[ptr2] in _LETTERS: ptr2 += 1
            isnum = False

        seg1, seg2 = a[one:ptr1], b[two:ptr2]

        # Segments of different types: numeric is always newer than alpha
        if not seg2:
            return 1 if isnum else -1

        if isnum:
            seg1, seg2 = seg1.lstrip('0'), seg2.lstrip('0')
            if len(seg1) != len(seg2):
                return 1 if len(seg1) > len(seg2) else -1

        if seg1 != seg2:
            return 1 if seg1 > seg2 else -1

        one, two = ptr1, ptr2

    if one >= len1 and two >= len2:
        return 0

    # A remaining alpha string never beats an empty one
    if (one >= len1 and not (two < len2 and b[two] in _LETTERS)) or (one < len1 and a[one] in _LETTERS):
        return -1
    return 1


def parse_evr(evr: str) -> tuple[str, str, str | None]:
    """
    Splits '[epoch:]pkgver[-pkgrel]' into (epoch, pkgver, pkgrel).
    The epoch defaults to '0'; pkgrel is None when there is no '-'.
    """
    end_of_epoch = 0
    while end_of_epoch < len(evr) and evr[end_of_epoch] in _DIGITS:
        end_of_epoch += 1

    dash = evr.rfind('-', end_of_epoch)
    if dash == -1:
        rest, release = evr, None
    else:
        rest, release = evr[:dash], evr[dash + 1:]

    if end_of_epoch < len(rest) and rest[end_of_epoch] == ':':
        return evr[:end_of_epoch] or "0", rest[end_of_epoch + 1:], release
    return "0", rest, release


def compare_versions(version_str1, version_str2) -> VersionOrder:
    """
    Compares two '[epoch:]pkgver-pkgrel' version strings with pacman's rules.
    The epoch wins first, then pkgver; pkgrel only counts when both sides have one.
    Returns: OLDER if v1 < v2, EQUAL if v1 == v2, NEWER if v1 > v2
    """
    if version_str1 == version_str2:
        return VersionOrder.EQUAL

    epoch1, ver1, rel1 = parse_evr(version_str1)
    epoch2, ver2, rel2 = parse_evr(version_str2)

    result = compare_segments(epoch1, epoch2)
    if result == 0:
        result = compare_segments(ver1, ver2)
        if result == 0 and rel1 is not None and rel2 is not None:
            result = compare_segments(rel1, rel2)

    logger.debug(f"vercmp {version_str1} {version_str2} -> {result}")
    return VersionOrder(_sign(result))
