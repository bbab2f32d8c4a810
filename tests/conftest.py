import os
import sys
from collections.abc import Iterator

import pytest
from hypothesis import HealthCheck, settings

# Subprocess coverage for the CLI entrypoint tests
if os.getenv("COVERAGE_PROCESS_START"):
    import coverage

    coverage.process_startup()

settings.register_profile(
    "ci", max_examples=300, suppress_health_check=[HealthCheck.too_slow]
)
settings.register_profile("dev", max_examples=50)
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "dev"))


@pytest.fixture(autouse=True)  # type: ignore[misc]
def restore_recursion_limit() -> Iterator[None]:
    limit = sys.getrecursionlimit()
    yield
    sys.setrecursionlimit(limit)
