import os
import sys
from pathlib import Path

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
sys.path.insert(0, str(Path(__file__).parent.parent))
sys.path.insert(0, str(Path(__file__).parent))

import pytest
from PyQt6.QtWidgets import QApplication

from common import FakeClient
from spot_feed import SpotFeed


@pytest.fixture(scope="session")
def qapp():
    app = QApplication.instance() or QApplication([])
    yield app


@pytest.fixture
def fake_client():
    return FakeClient()


@pytest.fixture
def feed(fake_client):
    return SpotFeed(fake_client)
