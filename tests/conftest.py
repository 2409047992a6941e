import pytest
from typer.testing import CliRunner
from unittest.mock import AsyncMock, MagicMock

from apiqueue.domain.interfaces.api_client import ApiClient
from apiqueue.domain.interfaces.quota_source import QuotaSource
from apiqueue.domain.models.page import Page
from apiqueue.infrastructure.config.settings import clear_test_config
from apiqueue.infrastructure.cli.display import ConsoleDisplay


def quota_sequence(*snapshots):
    """AsyncMock returning each snapshot in turn, then repeating the last one."""
    pending = list(snapshots)

    async def get_rate_limit():
        if len(pending) > 1:
            return pending.pop(0)
        return pending[0]

    return AsyncMock(side_effect=get_rate_limit)


@pytest.fixture
def make_quota():
    """Factory for quota sequences, see quota_sequence."""
    return quota_sequence


@pytest.fixture
def quota_source():
    """Quota source with ample quota; tests replace get_rate_limit as needed."""
    source = MagicMock(spec=QuotaSource)
    source.get_rate_limit = quota_sequence({'remaining': 999, 'reset': 0})
    return source


@pytest.fixture
def api_client():
    """Mock ApiClient whose single page has no successor."""
    client = MagicMock(spec=ApiClient)
    client.get_rate_limit = quota_sequence({'remaining': 999, 'reset': 0})
    client.get_items = AsyncMock(return_value=Page(data=['one']))
    client.get_item = AsyncMock(return_value={'id': 1})
    client.get_next_page = AsyncMock()
    client.has_next_page = MagicMock(return_value=False)
    return client


@pytest.fixture(scope="session")
def runner():
    """Provides a Typer CliRunner instance."""
    return CliRunner()


@pytest.fixture
def mock_console_display(mocker):
    """Patches ConsoleDisplay where main.py builds it."""
    mock = mocker.MagicMock(spec=ConsoleDisplay)
    mocker.patch('apiqueue.main.ConsoleDisplay', return_value=mock)
    return mock


@pytest.fixture
def cli_environment(mocker):
    """Keeps CLI runs away from real config files and the root logger."""
    mocker.patch('apiqueue.main.load_configuration')
    mocker.patch('apiqueue.main.configure_logging')


@pytest.fixture(autouse=True)
def reset_test_config():
    yield
    clear_test_config()
