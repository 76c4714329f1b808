"""Resource loading infrastructure for the bundle chain.

Provides the protocol for resource loaders, a directory loader for user
override files, a packaged loader for resources shipped with the host
application, and result/summary data structures for tracking load attempts.

Components:
    ResourceLoader - Protocol for resolving resources (structural typing)
    DirectoryResourceLoader - Disk-based loader with path-traversal prevention
    PackageResourceLoader - importlib.resources / sys.path loader
    validate_resource_name - Shared name checks for every loader
    TierLoadResult - Immutable result of a single tier load attempt
    LoadSummary - Immutable aggregate of all load results from one build

Python 3.13+. Zero external dependencies.
"""

from __future__ import annotations

import io
import logging
import sys
import threading
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING, Protocol

from bundlechain.constants import FORBIDDEN_RESOURCE_SUFFIXES, MAX_RESOURCE_SIZE
from bundlechain.enums import LoadStatus, Tier

if TYPE_CHECKING:
    from importlib.resources.abc import Traversable
    from typing import BinaryIO

    from bundlechain.resources.types import ResourceName

# ruff: noqa: RUF022 - __all__ organized by category for readability
__all__ = [
    # Protocol
    "ResourceLoader",
    # Concrete loaders
    "DirectoryResourceLoader",
    "PackageResourceLoader",
    "validate_resource_name",
    # Load result types
    "TierLoadResult",
    "LoadSummary",
]

logger = logging.getLogger(__name__)


class ResourceLoader(Protocol):
    """Protocol for resolving slash-separated resource names to bytes.

    This is a Protocol (structural typing) rather than ABC to allow
    maximum flexibility for users implementing custom loaders.

    Example:
        >>> class MemoryLoader:
        ...     def __init__(self, files: dict[str, bytes]) -> None:
        ...         self.files = files
        ...     def resolve(self, name: str):
        ...         data = self.files.get(name)
        ...         return None if data is None else io.BytesIO(data)
        ...     def locate(self, name: str):
        ...         return f"memory:{name}" if name in self.files else None
        ...     def invalidate(self) -> None:
        ...         pass
    """

    def resolve(self, name: ResourceName) -> BinaryIO | None:
        """Open a resource for reading.

        Args:
            name: Relative, slash-separated resource name

        Returns:
            Binary stream (caller closes it), or None if the resource
            does not exist

        Raises:
            ValueError: If the name escapes the loader root or names
                executable code
            OSError: If the resource exists but cannot be read
        """

    def locate(self, name: ResourceName) -> str | None:
        """Describe where a resource lives, for diagnostics.

        Returns:
            Locator string (a file:// URI for real files), or None if the
            resource does not exist
        """

    def invalidate(self) -> None:
        """Drop any cached resource content."""


def validate_resource_name(name: ResourceName) -> PurePosixPath:
    """Validate a resource name against traversal and executable code.

    Args:
        name: Relative, slash-separated resource name

    Returns:
        Parsed relative path

    Raises:
        ValueError: If the name is empty, absolute, contains "..", has
            surrounding whitespace, or ends in an executable suffix
    """
    if not name or name.strip() != name:
        msg = f"Resource name is empty or has surrounding whitespace: {name!r}"
        raise ValueError(msg)
    if name.startswith(("/", "\\")) or Path(name).is_absolute():
        msg = f"Absolute paths not allowed in resource name: '{name}'"
        raise ValueError(msg)
    path = PurePosixPath(name.replace("\\", "/"))
    if ".." in path.parts:
        msg = f"Path traversal sequences not allowed in resource name: '{name}'"
        raise ValueError(msg)
    if path.suffix.lower() in FORBIDDEN_RESOURCE_SUFFIXES:
        msg = f"Loader refuses to resolve executable code: '{name}'"
        raise ValueError(msg)
    return path


def _read_limited(path: Path | Traversable) -> bytes:
    """Read at most MAX_RESOURCE_SIZE + 1 bytes so formats can reject the rest."""
    with path.open("rb") as stream:
        return stream.read(MAX_RESOURCE_SIZE + 1)


@dataclass(frozen=True, slots=True)
class DirectoryResourceLoader:
    """File system loader rooted at one directory.

    Serves the External tier. Resource content is cached after the first
    read until invalidate() is called, so repeated builds do not hit disk.

    Security:
        Names are validated with validate_resource_name(). The resolved
        path must stay inside the root directory, which also rejects
        symlinks pointing outside of it.

    Example:
        >>> loader = DirectoryResourceLoader("/srv/overrides")
        >>> stream = loader.resolve("lang/it_it.lang")
        # Reads from: /srv/overrides/lang/it_it.lang

    Attributes:
        root: Directory all resource names are resolved against
    """

    root: Path
    _cache: dict[str, bytes] = field(
        default_factory=dict, init=False, repr=False, compare=False
    )
    _lock: threading.Lock = field(
        default_factory=threading.Lock, init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        """Resolve the root once so later containment checks are stable."""
        object.__setattr__(self, "root", Path(self.root).expanduser().resolve())

    def _path_for(self, name: ResourceName) -> Path:
        relative = validate_resource_name(name)
        full_path = (self.root / relative).resolve()
        try:
            full_path.relative_to(self.root)
        except ValueError:
            msg = f"Path traversal detected: '{name}' escapes root directory"
            raise ValueError(msg) from None
        return full_path

    def resolve(self, name: ResourceName) -> BinaryIO | None:
        """Open a resource under the root directory.

        Raises:
            ValueError: If the name is unsafe
            OSError: If the file exists but cannot be read
        """
        path = self._path_for(name)
        with self._lock:
            cached = self._cache.get(name)
        if cached is not None:
            return io.BytesIO(cached)
        if not path.is_file():
            return None
        data = _read_limited(path)
        with self._lock:
            self._cache[name] = data
        return io.BytesIO(data)

    def locate(self, name: ResourceName) -> str | None:
        """Return the file:// URI of an existing resource."""
        path = self._path_for(name)
        return path.as_uri() if path.is_file() else None

    def invalidate(self) -> None:
        """Forget every cached resource."""
        with self._lock:
            dropped = len(self._cache)
            self._cache.clear()
        logger.debug("Invalidated %d cached resources under %s", dropped, self.root)


@dataclass(frozen=True, slots=True)
class PackageResourceLoader:
    """Loader for resources packaged with the host application.

    Serves the Internal and Default tiers. With a package anchor the
    resource names are resolved with importlib.resources (works for zipped
    packages too). Without one, every directory on sys.path is searched in
    order and the first match wins.

    Packaged resources do not change while the process runs, so nothing is
    cached here and invalidate() is a no-op.

    Example:
        >>> loader = PackageResourceLoader("myapp.i18n")
        >>> stream = loader.resolve("lang/en_us.lang")
        # Reads myapp/i18n/lang/en_us.lang from the installed package

    Attributes:
        package: Dotted package name used as the anchor, or None to search
            the sys.path roots
    """

    package: str | None = None

    def _find(self, name: ResourceName) -> Path | Traversable | None:
        relative = validate_resource_name(name)
        if self.package is not None:
            candidate = resources.files(self.package).joinpath(*relative.parts)
            return candidate if candidate.is_file() else None
        for entry in sys.path:
            root = Path(entry or ".")
            if not root.is_dir():
                continue
            path = root.joinpath(*relative.parts)
            if path.is_file():
                return path
        return None

    def resolve(self, name: ResourceName) -> BinaryIO | None:
        """Open a packaged resource.

        Raises:
            ValueError: If the name is unsafe
            ModuleNotFoundError: If the package anchor cannot be imported
        """
        found = self._find(name)
        if found is None:
            return None
        return io.BytesIO(_read_limited(found))

    def locate(self, name: ResourceName) -> str | None:
        """Return a file:// URI for real files, the traversable's repr otherwise."""
        found = self._find(name)
        if found is None:
            return None
        if isinstance(found, Path):
            return found.resolve().as_uri()
        return str(found)

    def invalidate(self) -> None:
        """Packaged resources are never cached."""


@dataclass(frozen=True, slots=True)
class TierLoadResult:
    """Result of loading one tier of the bundle chain.

    Attributes:
        tier: Tier this result belongs to
        locale: Canonical locale string the tier was loaded for
        resource_name: Most specific resource that was loaded, or the most
            specific candidate name when nothing was loaded
        status: Load status (success, not_found, error, skipped)
        error: First candidate failure; set for ERROR, and for SUCCESS when
            some candidate failed while others loaded
        source: Locator of the loaded resource (if available)
        resources_loaded: Every candidate resource that contributed keys,
            most specific first
        failed_resources: Candidate resources that failed to load, most
            specific first
    """

    tier: Tier
    locale: str
    resource_name: str
    status: LoadStatus
    error: Exception | None = None
    source: str | None = None
    resources_loaded: tuple[str, ...] = ()
    failed_resources: tuple[str, ...] = ()

    @property
    def is_success(self) -> bool:
        """Check if the tier loaded successfully."""
        return self.status == LoadStatus.SUCCESS

    @property
    def is_not_found(self) -> bool:
        """Check if no candidate resource existed (expected for partial translations)."""
        return self.status == LoadStatus.NOT_FOUND

    @property
    def is_error(self) -> bool:
        """Check if the tier failed with an error."""
        return self.status == LoadStatus.ERROR

    @property
    def is_skipped(self) -> bool:
        """Check if the tier was not configured."""
        return self.status == LoadStatus.SKIPPED


@dataclass(frozen=True, slots=True)
class LoadSummary:
    """Immutable aggregate of tier load results from one chain build.

    All statistics are computed properties derived from the ``results``
    tuple.

    Attributes:
        results: Individual tier results, External first

    Example:
        >>> summary = translator.get_load_summary()
        >>> if summary.has_errors:
        ...     for result in summary.get_errors():
        ...         print(f"Failed: {result.tier}/{result.resource_name}: {result.error}")
    """

    results: tuple[TierLoadResult, ...]

    def __repr__(self) -> str:
        """Return string representation for debugging."""
        return (
            f"LoadSummary(total={self.total_attempted}, "
            f"ok={self.successful}, "
            f"not_found={self.not_found}, "
            f"errors={self.errors}, "
            f"skipped={self.skipped})"
        )

    @property
    def total_attempted(self) -> int:
        """Number of tiers that were actually attempted (skipped excluded)."""
        return sum(1 for r in self.results if not r.is_skipped)

    @property
    def successful(self) -> int:
        """Number of tiers loaded successfully."""
        return sum(1 for r in self.results if r.is_success)

    @property
    def not_found(self) -> int:
        """Number of tiers with no resource."""
        return sum(1 for r in self.results if r.is_not_found)

    @property
    def errors(self) -> int:
        """Number of tiers that failed with an error."""
        return sum(1 for r in self.results if r.is_error)

    @property
    def skipped(self) -> int:
        """Number of tiers that were not configured."""
        return sum(1 for r in self.results if r.is_skipped)

    def get_errors(self) -> tuple[TierLoadResult, ...]:
        """Get all results with errors."""
        return tuple(r for r in self.results if r.is_error)

    def get_not_found(self) -> tuple[TierLoadResult, ...]:
        """Get all results where no resource was found."""
        return tuple(r for r in self.results if r.is_not_found)

    def get_successful(self) -> tuple[TierLoadResult, ...]:
        """Get all successful load results."""
        return tuple(r for r in self.results if r.is_success)

    def get_by_tier(self, tier: Tier) -> TierLoadResult | None:
        """Get the result for a specific tier, if it was recorded."""
        for result in self.results:
            if result.tier == tier:
                return result
        return None

    @property
    def has_errors(self) -> bool:
        """Check if any tier failed to load with errors."""
        return self.errors > 0

    @property
    def all_successful(self) -> bool:
        """Check if every attempted tier loaded.

        Skipped tiers do not count against success.

        Returns:
            True if errors == 0 and not_found == 0
        """
        return self.errors == 0 and self.not_found == 0
