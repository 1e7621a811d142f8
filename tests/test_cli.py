"""
Tests for the click CLI.

Session managers and orchestrators are patched where the commands look
them up; database-backed commands run against a temporary SQLite file.
"""

import json

import pytest
import requests
from click.testing import CliRunner
from unittest.mock import patch, MagicMock, Mock

from unsubscriber.cli.main import cli
from unsubscriber.cli.utils import parse_email_ids, echo_result
from unsubscriber.cli_session import CLISessionManager
from unsubscriber.database.models import EmailMessage, UnsubscribeLog
from unsubscriber.engine.exceptions import ClassifierError
from unsubscriber.engine.orchestrator import UnsubscribeOrchestrator
from unsubscriber.engine.types import UnsubscribeAttempt


@pytest.fixture(autouse=True)
def quiet_logging():
    with patch('unsubscriber.cli.main.configure_unsubscribe_logging'):
        yield


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def session_manager(tmp_path):
    return CLISessionManager(f"sqlite:///{tmp_path / 'cli.db'}")


@pytest.fixture
def orchestrator():
    orchestrator = Mock(spec=UnsubscribeOrchestrator)
    orchestrator.attempt.return_value = UnsubscribeAttempt.succeeded('http', 'https://x.test/u')
    return orchestrator


@pytest.fixture
def stored_email(session_manager):
    with session_manager.get_session() as session:
        email_msg = EmailMessage(
            sender_email='news@x.test',
            subject='Digest',
            content_html='<a href="https://x.test/u">unsubscribe</a>'
        )
        session.add(email_msg)
        session.commit()
        return email_msg.id


class TestParseEmailIds:

    @pytest.mark.parametrize('value,expected', [
        ('5', [5]),
        ('1,2,3', [1, 2, 3]),
        ('1-3', [1, 2, 3]),
        ('1,3-5,7', [1, 3, 4, 5, 7]),
        ('2,1-3', [2, 1, 3]),
    ])
    def test_formats(self, value, expected):
        assert parse_email_ids(value) == expected

    @pytest.mark.parametrize('value', ['', '5-1', 'abc'])
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            parse_email_ids(value)


class TestBasicCommands:
    """Test help, version and admin commands."""

    def test_help_lists_commands(self, runner):
        result = runner.invoke(cli, ['--help'])

        assert result.exit_code == 0
        for command in ('init', 'import-email', 'unsubscribe', 'bulk-unsubscribe', 'logs'):
            assert command in result.output

    def test_version(self, runner):
        result = runner.invoke(cli, ['--version'])

        assert result.exit_code == 0
        assert '0.1.0' in result.output

    def test_init(self, runner, tmp_path):
        url = f"sqlite:///{tmp_path / 'init.db'}"

        with patch('unsubscriber.cli.commands.admin.init_database') as mock_init:
            mock_init.return_value = Mock(database_url=url)
            result = runner.invoke(cli, ['init'])

        assert result.exit_code == 0
        assert 'initialized' in result.output.lower()

    def test_init_failure_aborts(self, runner):
        with patch('unsubscriber.cli.commands.admin.init_database', side_effect=RuntimeError('disk full')):
            result = runner.invoke(cli, ['init'])

        assert result.exit_code != 0
        assert 'disk full' in result.output

    def test_automation_health_not_configured(self, runner):
        with patch('unsubscriber.cli.commands.admin.Config.BROWSER_AUTOMATION_URL', None):
            result = runner.invoke(cli, ['automation-health'])

        assert result.exit_code == 0
        assert 'not configured' in result.output

    def test_automation_health_down(self, runner):
        with patch('unsubscriber.cli.commands.admin.Config.BROWSER_AUTOMATION_URL', 'https://automation.test'), \
             patch('requests.get', side_effect=requests.exceptions.ConnectionError()):
            result = runner.invoke(cli, ['automation-health'])

        assert result.exit_code != 0
        assert 'not responding' in result.output


class TestImportEmail:

    def test_imports_files(self, runner, session_manager, tmp_path):
        html_file = tmp_path / 'promo.html'
        html_file.write_text('<a href="https://x.test/u">u</a>', encoding='utf-8')
        empty_file = tmp_path / 'empty.txt'
        empty_file.write_text('', encoding='utf-8')

        with patch('unsubscriber.cli.commands.email.get_cli_session_manager', return_value=session_manager):
            result = runner.invoke(cli, ['import-email', str(html_file), str(empty_file)])

        assert result.exit_code == 0
        assert 'Imported 1 email' in result.output
        with session_manager.get_session() as session:
            stored = session.query(EmailMessage).one()
            assert stored.content_html == '<a href="https://x.test/u">u</a>'
            assert stored.subject == 'promo'

    def test_imports_eml_with_non_ascii_headers(self, runner, session_manager, tmp_path):
        eml_file = tmp_path / 'boletin.eml'
        eml_file.write_bytes(
            b"From: Jos\xc3\xa9 <news@x.test>\r\n"
            b"Subject: Bolet\xc3\xadn semanal\r\n"
            b"Content-Type: text/html; charset=utf-8\r\n\r\n"
            b"<a href=\"https://x.test/u\">Darse de baja</a>\r\n"
        )

        with patch('unsubscriber.cli.commands.email.get_cli_session_manager', return_value=session_manager):
            result = runner.invoke(cli, ['import-email', str(eml_file)])

        assert result.exit_code == 0, result.output
        with session_manager.get_session() as session:
            stored = session.query(EmailMessage).one()
            assert stored.subject == 'Bolet\xedn semanal'
            assert 'news@x.test' in stored.sender_email


class TestUnsubscribeCommand:
    """Test 'unsubscribe' command."""

    def test_unsubscribe_records_log(self, runner, session_manager, stored_email, orchestrator):
        with patch('unsubscriber.cli.commands.action.get_cli_session_manager', return_value=session_manager), \
             patch('unsubscriber.cli.commands.action.get_orchestrator', return_value=orchestrator):
            result = runner.invoke(cli, ['unsubscribe', '--id', str(stored_email), '--user', 'bob'])

        assert result.exit_code == 0
        assert 'success' in result.output
        with session_manager.get_session() as session:
            log = session.query(UnsubscribeLog).one()
            assert log.acting_user == 'bob'
            assert log.status == 'success'

    def test_dry_run(self, runner, session_manager, stored_email, orchestrator):
        with patch('unsubscriber.cli.commands.action.get_cli_session_manager', return_value=session_manager), \
             patch('unsubscriber.cli.commands.action.get_orchestrator', return_value=orchestrator):
            result = runner.invoke(cli, ['unsubscribe', '--id', str(stored_email), '--dry-run'])

        assert result.exit_code == 0
        assert 'DRY RUN' in result.output
        orchestrator.attempt.assert_not_called()

    def test_nonexistent_id(self, runner):
        with patch('unsubscriber.cli.commands.action.get_cli_session_manager') as mock_manager:
            mock_session = MagicMock()
            mock_session.query.return_value.filter_by.return_value.first.return_value = None
            mock_manager.return_value.get_session.return_value.__enter__.return_value = mock_session

            result = runner.invoke(cli, ['unsubscribe', '--id', '999'])

        assert result.exit_code != 0
        assert 'not found' in result.output.lower()

    def test_error_attempt_exits_nonzero(self, runner, session_manager, stored_email, orchestrator):
        orchestrator.attempt.return_value = UnsubscribeAttempt.failed(
            'manual', 'https://x.test/u', 'Page requires CAPTCHA verification'
        )

        with patch('unsubscriber.cli.commands.action.get_cli_session_manager', return_value=session_manager), \
             patch('unsubscriber.cli.commands.action.get_orchestrator', return_value=orchestrator):
            result = runner.invoke(cli, ['unsubscribe', '--id', str(stored_email)])

        assert result.exit_code != 0
        assert 'CAPTCHA' in result.output

    def test_missing_api_key_aborts(self, runner, session_manager, stored_email):
        with patch('unsubscriber.cli.commands.action.get_cli_session_manager', return_value=session_manager), \
             patch('unsubscriber.cli.utils.Config.OPENAI_API_KEY', None):
            result = runner.invoke(cli, ['unsubscribe', '--id', str(stored_email)])

        assert result.exit_code != 0
        assert 'OPENAI_API_KEY' in result.output


class TestBulkUnsubscribeCommand:

    def test_bulk(self, runner, session_manager, stored_email, orchestrator):
        with patch('unsubscriber.cli.commands.action.get_cli_session_manager', return_value=session_manager), \
             patch('unsubscriber.cli.commands.action.get_orchestrator', return_value=orchestrator):
            result = runner.invoke(cli, ['bulk-unsubscribe', f'{stored_email},999', '--workers', '2'])

        assert result.exit_code == 0
        assert '1/2 succeeded' in result.output
        assert 'Email not found' in result.output
        assert 'via None' not in result.output

    def test_invalid_ids(self, runner):
        result = runner.invoke(cli, ['bulk-unsubscribe', '5-1'])

        assert result.exit_code != 0
        assert 'Error parsing IDs' in result.output


class TestUnsubscribeFileCommand:

    def test_json_output(self, runner, tmp_path, orchestrator):
        path = tmp_path / 'mail.html'
        path.write_text('<a href="https://x.test/u">u</a>', encoding='utf-8')

        with patch('unsubscriber.cli.commands.action.get_orchestrator', return_value=orchestrator):
            result = runner.invoke(cli, ['unsubscribe-file', str(path), '--json'])

        assert result.exit_code == 0
        assert json.loads(result.output) == {
            'status': 'success', 'method': 'http', 'target': 'https://x.test/u', 'error': None
        }
        orchestrator.attempt.assert_called_once_with('<a href="https://x.test/u">u</a>', None)

    def test_classifier_failure(self, runner, tmp_path, orchestrator):
        path = tmp_path / 'mail.txt'
        path.write_text('hello', encoding='utf-8')
        orchestrator.attempt.side_effect = ClassifierError('extract_link request failed')

        with patch('unsubscriber.cli.commands.action.get_orchestrator', return_value=orchestrator):
            result = runner.invoke(cli, ['unsubscribe-file', str(path)])

        assert result.exit_code != 0
        assert 'extract_link request failed' in result.output


class TestLogsCommand:

    def test_empty(self, runner, session_manager):
        with patch('unsubscriber.cli.commands.logs.get_cli_session_manager', return_value=session_manager):
            result = runner.invoke(cli, ['logs'])

        assert result.exit_code == 0
        assert 'No unsubscribe attempts recorded' in result.output

    def test_filter_by_status(self, runner, session_manager, stored_email):
        with session_manager.get_session() as session:
            session.add_all([
                UnsubscribeLog(email_id=stored_email, acting_user='cli', status='success',
                               unsubscribe_method='http', unsubscribe_target='https://x.test/ok'),
                UnsubscribeLog(email_id=stored_email, acting_user='cli', status='error',
                               unsubscribe_method='manual', unsubscribe_target='https://x.test/login',
                               error_message='Page requires authentication'),
            ])
            session.commit()

        with patch('unsubscriber.cli.commands.logs.get_cli_session_manager', return_value=session_manager):
            result = runner.invoke(cli, ['logs', '--status', 'error'])

        assert result.exit_code == 0
        assert 'Page requires authentication' in result.output
        assert 'https://x.test/ok' not in result.output


class TestEchoResult:

    def test_missing_method_not_printed(self, capsys):
        echo_result('error', None, None, 'Email not found')

        out = capsys.readouterr().out
        assert 'Email not found' in out
        assert 'None' not in out

    def test_error_with_method(self, capsys):
        echo_result('error', 'manual', 'https://x.test/u', 'Page requires authentication')

        out = capsys.readouterr().out
        assert 'error via manual: Page requires authentication' in out
        assert 'Target: https://x.test/u' in out
