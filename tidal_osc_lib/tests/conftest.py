"""
Pytest configuration and fixtures for tidal_osc_lib tests.
"""

import socket

import pytest


class Recorder:
    """Callable that remembers everything it was called with."""

    def __init__(self):
        self.calls = []

    def __call__(self, value):
        self.calls.append(value)

    def __len__(self):
        return len(self.calls)

    @property
    def last(self):
        return self.calls[-1]


@pytest.fixture
def recorder():
    """Fresh callback recorder."""
    return Recorder()


def _udp_port_free(port: int) -> bool:
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        try:
            sock.bind(("127.0.0.1", port))
        except OSError:
            return False
    return True


@pytest.fixture
def free_port_block():
    """First of three consecutive free UDP ports (main, tempo, rms)."""
    for base in range(47120, 60000, 7):
        if all(_udp_port_free(base + offset) for offset in range(3)):
            return base
    pytest.skip("No block of free UDP ports available")
