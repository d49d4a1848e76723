"""
Unit tests for the command-line entry point.

Configuration loaders and ReleasePipeline are patched; only argument
handling and exit codes are exercised.
"""

from unittest.mock import patch

import pytest

from disclosure_relay import cli
from disclosure_relay.config import AppConfig
from disclosure_relay.models import RunSummary


@pytest.fixture
def patched(relay_config):
    """Patch config loaders and the pipeline class used by cli.main()."""
    with patch.object(cli, 'get_app_config') as get_app, \
         patch.object(cli, 'get_relay_config') as get_relay, \
         patch.object(cli, 'ReleasePipeline') as pipeline_cls, \
         patch.object(cli, 'setup_logging'):
        get_app.return_value = AppConfig(_env_file=None)
        get_relay.return_value = relay_config
        pipeline = pipeline_cls.from_config.return_value
        pipeline.run.return_value = RunSummary(status='completed')
        yield get_app, pipeline


class TestMain:
    """Test suite for cli.main()."""

    def test_successful_run_exits_zero(self, patched):
        _, pipeline = patched

        assert cli.main([]) == 0
        pipeline.run.assert_called_once_with(test_mode=False)

    def test_test_flag(self, patched):
        _, pipeline = patched

        cli.main(['--test'])

        pipeline.run.assert_called_once_with(test_mode=True)

    def test_test_mode_from_environment(self, patched):
        """TEST_MODE=true in the environment acts like --test."""
        get_app, pipeline = patched
        get_app.return_value = AppConfig(_env_file=None, test_mode=True)

        cli.main([])

        pipeline.run.assert_called_once_with(test_mode=True)

    def test_fatal_run_exits_one(self, patched):
        _, pipeline = patched
        pipeline.run.side_effect = RuntimeError("Pipeline run failed: boom")

        assert cli.main([]) == 1

    @pytest.mark.parametrize("healthy,expected", [(True, 0), (False, 1)])
    def test_health(self, patched, healthy, expected):
        _, pipeline = patched
        pipeline.health_check.return_value = healthy

        assert cli.main(['--health']) == expected
        pipeline.run.assert_not_called()

    def test_missing_config_file_exits_one(self, patched):
        _, pipeline = patched
        with patch.object(cli, 'get_relay_config', side_effect=FileNotFoundError("schedule.yaml")):
            assert cli.main([]) == 1


class TestBuildParser:
    def test_defaults(self):
        args = cli.build_parser().parse_args([])

        assert args.test is False
        assert args.health is False
