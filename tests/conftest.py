import pytest
from PySide6.QtCore import QCoreApplication

from rsynckit.config import ProcessConfig
from rsynckit.coordinator import Rsync


@pytest.fixture(scope="session")
def qapp():
    """QProcess and QEventLoop need an application instance."""
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


@pytest.fixture
def command() -> Rsync:
    return Rsync.build({"source": "SOURCE", "destination": "DESTINATION"}, process_config=ProcessConfig())


def assert_output(command: Rsync, expected: str) -> None:
    """Asserts the exact command line, without having to repeat the executable."""
    assert command.command() == f"{command.executable()} {expected}"
