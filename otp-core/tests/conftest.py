import pytest

from otp_core.otp import InMemoryBackend, OTPConfig, OTPGenerator, OTPStore

TEST_SECRET = "test-otp-secret"


@pytest.fixture
def generator():
    return OTPGenerator(OTPConfig(), secret=TEST_SECRET)


@pytest.fixture
def backend():
    return InMemoryBackend()


@pytest.fixture
def store(backend, generator):
    return OTPStore(backend, generator, max_attempts=3)
