"""Tests for configuration and logging setup."""

import argparse
import logging

import pytest

from app import CertRenewalApp
from certs_analyzer.errors import ConfigurationError
from conftest import FakeClusterStore
from main import parse_args
from utils.config import Config
from utils.logger import ColoredFormatter, setup_logging


def namespace(**overrides):
    values = dict(issuer_name=None, renew=False, kubeconfig=None, context=None,
                  verbose=False, log_file=None)
    values.update(overrides)
    return argparse.Namespace(**values)


class TestConfig:

    def test_defaults(self):
        config = Config(namespace(), environ={})

        assert config.get_issuer_name() == ""
        assert not config.is_issuer_filter_enabled()
        assert not config.is_renew_enabled()
        assert config.poll_interval == 1.0
        assert config.poll_timeout == 60.0
        assert config.warning_delay == 5.0
        assert config.confirmation_delay == 2.0

    def test_environment_values(self):
        env = {
            "CERT_RENEW_ISSUER_NAME": "letsencrypt-prod",
            "KUBECONFIG": "/etc/kube/config",
            "CERT_RENEW_POLL_TIMEOUT": "120",
        }

        config = Config(None, environ=env)

        assert config.get_issuer_name() == "letsencrypt-prod"
        assert config.get_kubeconfig() == "/etc/kube/config"
        assert config.poll_timeout == 120.0

    def test_arguments_override_environment(self):
        env = {"CERT_RENEW_ISSUER_NAME": "from-env", "KUBECONFIG": "/env/config"}

        config = Config(namespace(issuer_name="from-cli", kubeconfig="/cli/config"), environ=env)

        assert config.get_issuer_name() == "from-cli"
        assert config.get_kubeconfig() == "/cli/config"

    def test_empty_issuer_argument_disables_env_filter(self):
        config = Config(namespace(issuer_name=""), environ={"CERT_RENEW_ISSUER_NAME": "from-env"})

        assert not config.is_issuer_filter_enabled()

    @pytest.mark.parametrize("value", ["soon", "-1"])
    def test_invalid_durations(self, value):
        with pytest.raises(ConfigurationError):
            Config(None, environ={"CERT_RENEW_POLL_TIMEOUT": value})

    @pytest.mark.parametrize("variable", [
        "CERT_RENEW_POLL_INTERVAL",
        "CERT_RENEW_WARNING_DELAY",
        "CERT_RENEW_CONFIRMATION_DELAY",
    ])
    def test_zero_delays_rejected(self, variable):
        with pytest.raises(ConfigurationError, match=variable):
            Config(None, environ={variable: "0"})

    def test_renew_only_enabled_by_flag(self):
        assert not Config(parse_args([]), environ={"CERT_RENEW_RENEW": "yes"}).is_renew_enabled()
        assert Config(parse_args(["--renew"]), environ={}).is_renew_enabled()

    def test_renew_in_environment_stays_dry_run(self, three_certificates, fake_clock):
        store = FakeClusterStore(*three_certificates)
        config = Config(parse_args([]), environ={"CERT_RENEW_RENEW": "yes"})
        app = CertRenewalApp(config, store=store, sleep=fake_clock.sleep, clock=fake_clock)

        assert app.run() == 0
        assert store.mutations == 0
        assert store.list_request_calls == 0
        assert fake_clock.sleeps == []


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            handler.close()
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


@pytest.mark.usefixtures("restore_root_logger")
class TestLogging:

    def test_setup_logging_levels(self):
        root = setup_logging(verbose=True, use_colors=False)
        assert root.level == logging.DEBUG

        root = setup_logging(verbose=False, use_colors=False)
        assert root.level == logging.INFO
        assert len(root.handlers) == 1

    def test_log_file_handler(self, tmp_path):
        log_file = tmp_path / "renewal.log"

        root = setup_logging(log_file=str(log_file), use_colors=False)
        logging.getLogger("certs_analyzer.test").info("hello file")
        for handler in root.handlers:
            handler.flush()

        assert "hello file" in log_file.read_text()

    def test_formatter_without_colors(self):
        record = logging.LogRecord("x", logging.WARNING, __file__, 1, "careful", None, None)

        output = ColoredFormatter(use_colors=False).format(record)

        assert "[WARNING] careful" in output
        assert "\033[" not in output
