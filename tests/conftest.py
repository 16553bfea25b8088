"""Shared fixtures for the ratecore test-suite."""
import sys
from pathlib import Path

import pytest

REPO_ROOT = Path(__file__).resolve().parent.parent
SRC = REPO_ROOT / "src"

for path in (SRC, REPO_ROOT):
    if path.exists() and str(path) not in sys.path:
        sys.path.insert(0, str(path))

from ratecore.core import get_config, init_environment, make_rng  # noqa: E402
from ratecore.market import ConstantYieldCurve, CurveBundleBuilder, MulticurveProvider  # noqa: E402


@pytest.fixture(scope="session")
def environment():
    """Environment configured once per session with DEBUG logging."""
    return init_environment(get_config({"logging": {"level": "DEBUG", "force": False}}))


@pytest.fixture
def rng(environment):
    return make_rng(environment)


@pytest.fixture
def flat_provider():
    """USD single-curve provider on a flat 3% curve, index ``USD-LIBOR-3M``."""
    bundle = CurveBundleBuilder().add("USD-FLAT", ConstantYieldCurve(0.03)).build()
    return MulticurveProvider(bundle, discounting={"USD": "USD-FLAT"}, forwards={"USD-LIBOR-3M": "USD-FLAT"})
