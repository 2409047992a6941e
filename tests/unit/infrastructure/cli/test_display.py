import pytest
from unittest.mock import MagicMock

from rich.json import JSON
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from apiqueue.domain.models.quota import QuotaSnapshot
from apiqueue.infrastructure.cli.display import ConsoleDisplay

@pytest.fixture
def mock_console():
    """Fixture to create a mock rich Console object."""
    return MagicMock()

@pytest.fixture
def console_display(mock_console: MagicMock):
    """Fixture to create a ConsoleDisplay instance with a mocked console."""
    display = ConsoleDisplay()
    display.console = mock_console # Inject the mock
    return display

def test_display_output_renders_json_panel(console_display: ConsoleDisplay, mock_console: MagicMock):
    console_display.display_output([{'id': 1}], title="Items")
    mock_console.print.assert_called_once()
    panel = mock_console.print.call_args.args[0]
    assert isinstance(panel, Panel)
    assert isinstance(panel.renderable, JSON)
    assert "Items" in panel.title

def test_display_output_falls_back_to_text(console_display: ConsoleDisplay, mock_console: MagicMock):
    """Payloads json.dumps cannot encode even with default=str are shown as text."""
    console_display.display_output({1.5j: 'complex key'})
    panel = mock_console.print.call_args.args[0]
    assert isinstance(panel.renderable, Text)

def test_display_quota_prints_table(console_display: ConsoleDisplay, mock_console: MagicMock):
    console_display.display_quota(QuotaSnapshot(remaining=42, reset_at=0))
    table = mock_console.print.call_args.args[0]
    assert isinstance(table, Table)
    assert table.row_count == 1

def test_display_error(console_display: ConsoleDisplay, mock_console: MagicMock):
    console_display.display_error("Something went wrong")
    panel = mock_console.print.call_args.args[0]
    assert isinstance(panel, Panel)
    assert "Error" in panel.title
    assert panel.renderable.plain == "Something went wrong"

def test_display_warning_is_logged(console_display: ConsoleDisplay, mock_console: MagicMock, caplog):
    console_display.display_warning("No items returned.")
    mock_console.print.assert_called_once()
    assert "No items returned." in caplog.text

def test_display_info(console_display: ConsoleDisplay, mock_console: MagicMock):
    console_display.display_info("Done")
    panel = mock_console.print.call_args.args[0]
    assert "Info" in panel.title
