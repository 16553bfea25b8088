import pytest

from ratecore.core import (
    BudgetExceededError,
    ConfigurationError,
    NonConvergenceError,
    NonFiniteValueError,
    NumericalError,
    PricingError,
    RateCoreError,
    SingularSystemError,
)


@pytest.mark.fast
@pytest.mark.unit
@pytest.mark.parametrize(
    "error, bases",
    [
        (ConfigurationError, (RateCoreError, ValueError)),
        (NonConvergenceError, (RateCoreError, RuntimeError)),
        (BudgetExceededError, (NonConvergenceError,)),
        (SingularSystemError, (NumericalError, ArithmeticError)),
        (NonFiniteValueError, (NumericalError, ArithmeticError)),
        (PricingError, (RateCoreError, RuntimeError)),
    ],
)
def test_hierarchy(error, bases):
    for base in bases:
        assert issubclass(error, base)


@pytest.mark.fast
@pytest.mark.unit
def test_errors_carry_diagnostics():
    failure = NonConvergenceError("stalled", iterate=[1.0], residual=0.5, iterations=7)
    assert (failure.iterate, failure.residual, failure.iterations) == ([1.0], 0.5, 7)
    assert str(failure) == "stalled"
    assert SingularSystemError("singular", condition_number=1e20).condition_number == 1e20
    assert NonFiniteValueError("nan", point=0.5).point == 0.5
    assert BudgetExceededError("budget").iterations is None
