"""Pytest configuration for the bundlechain test suite.

Single Source of Truth for Hypothesis max_examples:
- dev: Local development with 500 examples (thorough property testing)
- ci: CI runs with 50 examples (fast feedback)
- verbose: Debug mode with progress output (100 examples)

Profile auto-detection:
- HYPOTHESIS_PROFILE env var -> explicit override
- CI=true environment variable -> "ci" profile
- Otherwise -> "dev" profile (local development)

Override manually: HYPOTHESIS_PROFILE=verbose pytest tests/

Fuzzing Test Separation:
Tests marked with @pytest.mark.fuzz are excluded from normal test runs.
Run them via: pytest -m fuzz

Shared fixtures:
    RESOURCES - Directory of fixture bundles (namespace "lang")
    packaged_loader - Loader serving RESOURCES as the packaged tiers
    translator - Translator for namespace "lang" in en_us
"""

import os
from collections.abc import Iterator
from pathlib import Path

import pytest
from hypothesis import Phase, Verbosity, settings

from bundlechain import Translator
from bundlechain.resources.loading import DirectoryResourceLoader
from bundlechain.runtime.locale_context import LocaleContext

RESOURCES = Path(__file__).parent / "resources"

# =============================================================================
# HYPOTHESIS PROFILES - SINGLE SOURCE OF TRUTH
# =============================================================================

settings.register_profile(
    "dev",
    max_examples=500,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    derandomize=False,
)

settings.register_profile(
    "ci",
    max_examples=50,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    derandomize=True,
    print_blob=True,
)

settings.register_profile(
    "verbose",
    max_examples=100,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    derandomize=False,
    verbosity=Verbosity.verbose,
)


def _detect_profile() -> str:
    """Pick the Hypothesis profile: HYPOTHESIS_PROFILE, then CI=true, then dev."""
    explicit = os.environ.get("HYPOTHESIS_PROFILE")
    if explicit in ("dev", "ci", "verbose"):
        return explicit
    if os.environ.get("CI") == "true":
        return "ci"
    return "dev"


settings.load_profile(_detect_profile())


# =============================================================================
# FUZZING TEST SEPARATION
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Register the 'fuzz' marker for intensive property tests."""
    config.addinivalue_line(
        "markers",
        "fuzz: Intensive property tests for fuzzing (excluded from normal test runs)",
    )


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    """Skip fuzz-marked tests unless explicitly requested with -m fuzz."""
    marker_expr = config.getoption("-m", default="")
    if "fuzz" in str(marker_expr):
        return

    skip_fuzz = pytest.mark.skip(reason="Fuzzing test - run with: pytest -m fuzz")
    for item in items:
        if "fuzz" in item.keywords:
            item.add_marker(skip_fuzz)


# =============================================================================
# SHARED FIXTURES
# =============================================================================


@pytest.fixture
def packaged_loader() -> DirectoryResourceLoader:
    """Fixture bundles served as if they were packaged with the application."""
    return DirectoryResourceLoader(RESOURCES)


@pytest.fixture
def translator(packaged_loader: DirectoryResourceLoader) -> Translator:
    """Translator for namespace "lang" in en_us, no override directory."""
    return Translator("lang", loader=packaged_loader)


@pytest.fixture
def override_dir(tmp_path: Path) -> Path:
    """Empty override directory with a "lang" folder ready for files."""
    (tmp_path / "lang").mkdir()
    return tmp_path


@pytest.fixture(autouse=True)
def _fresh_locale_contexts() -> Iterator[None]:
    """Isolate LocaleContext's class-level cache between tests."""
    LocaleContext.clear_cache()
    yield
    LocaleContext.clear_cache()
