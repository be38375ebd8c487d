"""Version parsing, comparison and wildcard pattern matching.

Versions are dotted integer sequences with an optional pre-release tag and
optional build metadata, e.g. ``v1.2.3-rc1+build.7``:

- trailing missing components compare as 0 (``1.2 == 1.2.0``)
- a version without a pre-release tag is greater than the same numbers with one
- pre-release content and build metadata never break ties
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple

WILDCARD = "*"


def _split_version_string(value: str) -> Tuple[str, str, str]:
    """Split ``v1.2.3-pre+meta`` into ``("1.2.3", "pre", "meta")``.

    Only the first two dash-separated segments are significant, so
    ``1.2.3-alpha-beta`` yields the pre-release tag ``alpha``.
    """
    nums_str = value[1:] if value.startswith("v") else value

    meta = ""
    parts = nums_str.split("+")
    if len(parts) > 1:
        nums_str = parts[0]
        meta = "+".join(parts[1:])

    pre = ""
    parts = nums_str.split("-")
    if len(parts) > 1:
        nums_str = parts[0]
        pre = parts[1]

    return nums_str, pre, meta


def _parse_component(segment: str) -> int:
    if segment.isascii() and segment.isdigit():
        return int(segment)
    return 0


@dataclass(frozen=True, eq=False)
class Version:
    """A parsed version. Metadata is cosmetic and ignored by comparisons."""
    nums: Tuple[int, ...]
    pre: str = ""
    meta: str = ""
    original: str = field(default="", compare=False)

    @classmethod
    def parse(cls, value: Optional[str]) -> "Version":
        """Parse a version string. Invalid or empty components become 0."""
        value = value or ""
        nums_str, pre, meta = _split_version_string(value)
        nums = tuple(_parse_component(segment) for segment in nums_str.split("."))
        return cls(nums=nums, pre=pre, meta=meta, original=value)

    def compare(self, other: "Version") -> int:
        """Return -1, 0 or 1 as this version is lower, equal or greater."""
        length = max(len(self.nums), len(other.nums))
        for idx in range(length):
            a = self.nums[idx] if idx < len(self.nums) else 0
            b = other.nums[idx] if idx < len(other.nums) else 0
            if a != b:
                return 1 if a > b else -1

        if not self.pre and other.pre:
            return 1
        if self.pre and not other.pre:
            return -1
        return 0

    def canonical(self) -> str:
        """Dotted numbers plus ``-pre`` when present; metadata is omitted."""
        result = ".".join(str(n) for n in self.nums)
        if self.pre:
            result += f"-{self.pre}"
        return result

    def _sort_key(self) -> Tuple[Tuple[int, ...], bool]:
        nums = list(self.nums)
        while nums and nums[-1] == 0:
            nums.pop()
        return tuple(nums), bool(self.pre)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.compare(other) == 0

    def __lt__(self, other: "Version") -> bool:
        return self.compare(other) < 0

    def __le__(self, other: "Version") -> bool:
        return self.compare(other) <= 0

    def __gt__(self, other: "Version") -> bool:
        return self.compare(other) > 0

    def __ge__(self, other: "Version") -> bool:
        return self.compare(other) >= 0

    def __hash__(self) -> int:
        return hash(self._sort_key())

    def __str__(self) -> str:
        if self.meta:
            return f"{self.canonical()}+{self.meta}"
        return self.canonical()


@dataclass(frozen=True)
class VersionPattern:
    """A version with ``*`` wildcards, e.g. ``1.2.*``.

    ``None`` components are wildcards. Positions past the end of the pattern
    always match, so ``1`` matches ``1.4.2``. Pre-release and metadata of the
    candidate version are ignored.
    """
    nums: Tuple[Optional[int], ...]
    original: str = ""

    @classmethod
    def parse(cls, value: Optional[str]) -> "VersionPattern":
        value = value or ""
        nums_str, _, _ = _split_version_string(value)
        nums = tuple(
            None if segment == WILDCARD else _parse_component(segment)
            for segment in nums_str.split(".")
        )
        return cls(nums=nums, original=value)

    def is_exact(self) -> bool:
        """True if the pattern contains no wildcard."""
        return all(n is not None for n in self.nums)

    def matches(self, version: Version) -> bool:
        length = max(len(self.nums), len(version.nums))
        for idx in range(length):
            expected = self.nums[idx] if idx < len(self.nums) else None
            if expected is None:
                continue
            actual = version.nums[idx] if idx < len(version.nums) else 0
            if expected != actual:
                return False
        return True

    def __str__(self) -> str:
        return self.original


def new_version(value: Optional[str]) -> Version:
    return Version.parse(value)


def new_version_pattern(value: Optional[str]) -> VersionPattern:
    return VersionPattern.parse(value)


def compare_versions(a: Version, b: Version) -> int:
    return a.compare(b)
