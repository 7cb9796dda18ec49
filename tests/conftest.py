import pytest

from bfast.reporting import SilentReporter, set_reporter, set_verbosity


@pytest.fixture(autouse=True)
def _reset_reporter():
    # CLI runs install a process-wide reporter; start every test quiet.
    set_reporter(SilentReporter())
    set_verbosity(0)
    yield
    set_reporter(SilentReporter())
    set_verbosity(0)
