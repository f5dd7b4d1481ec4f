from __future__ import annotations

import pytest
from helpers import FakeClock

from pi.autolink.keybindings import AutoLinkKeybindingsManager, set_autolink_keybindings


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture(autouse=True)
def default_keybindings():
    """Each test starts from the default key map."""
    set_autolink_keybindings(AutoLinkKeybindingsManager())
    yield
    set_autolink_keybindings(AutoLinkKeybindingsManager())
