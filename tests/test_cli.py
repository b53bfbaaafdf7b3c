"""End-to-end tests of the intmul command."""

import logging
import os
import subprocess
import sys
from pathlib import Path

import pytest
import yaml
from click.testing import CliRunner

from intmul.cli import cli

project_root = Path(__file__).parent.parent


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def restore_root_logger():
    """The command reconfigures the root logger; undo it after each test."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def invoke(runner, stdin: str, *args):
    return runner.invoke(cli, ['--backend', 'thread', *args], input=stdin)


class TestCliThreadBackend:
    """Test the command with thread units."""

    def test_known_product(self, runner):
        result = invoke(runner, "1a2b\n3c4d\n")
        assert result.exit_code == 0
        assert result.stdout == "0629f2ef\n"

    def test_single_digits(self, runner):
        result = invoke(runner, "f\nf\n")
        assert result.exit_code == 0
        assert result.stdout == "e1\n"

    def test_zero_operand(self, runner):
        result = invoke(runner, "0000\n1234\n")
        assert result.stdout == "00000000\n"

    def test_uppercase_operands(self, runner):
        result = invoke(runner, "ABCD\nEF01\n")
        assert int(result.stdout, 16) == 0xabcd * 0xef01
        assert result.stdout == result.stdout.lower()

    def test_empty_input(self, runner):
        result = invoke(runner, "\n12\n")
        assert result.exit_code == 1
        assert result.stdout == ""
        assert result.stderr == "[intmul]: no input given\n"

    def test_length_mismatch(self, runner):
        result = invoke(runner, "ab\na\n")
        assert result.exit_code == 1
        assert result.stdout == ""

    def test_odd_length(self, runner):
        result = invoke(runner, "abc\ndef\n")
        assert result.exit_code == 1
        assert result.stderr == "[intmul]: input is not even\n"

    def test_node_variable_in_shell_ignored(self, runner):
        result = runner.invoke(cli, ['--backend', 'thread'], input="2\n3\n",
                               env={'INTMUL_NODE': 'root/HH'})
        assert result.exit_code == 0
        assert result.stdout == "06\n"

    def test_spawned_unit_skips_padding(self, runner):
        result = invoke(runner, "2\n3\n", '--node', 'root/HH')
        assert result.exit_code == 0
        assert result.stdout == "6\n"

    def test_node_option_hidden_from_help(self, runner):
        result = runner.invoke(cli, ['--help'])
        assert '--backend' in result.stdout
        assert '--node' not in result.stdout

    def test_extra_arguments(self, runner):
        result = runner.invoke(cli, ['unexpected'], input="1\n2\n")
        assert result.exit_code == 1
        assert result.stdout == ""
        assert "correct usage: intmul" in result.stderr

    def test_missing_config_file(self, runner, tmp_path):
        result = invoke(runner, "1\n2\n", '--config', str(tmp_path / 'missing.yml'))
        assert result.exit_code == 1
        assert "invalid configuration" in result.stderr

    def test_config_file_program_name(self, runner, tmp_path):
        config_path = tmp_path / 'intmul.yml'
        with open(config_path, 'w') as f:
            yaml.dump({'workers': {'program': 'hexmul'}}, f)

        result = invoke(runner, "\n\n", '--config', str(config_path))
        assert result.stderr == "[hexmul]: no input given\n"

    def test_debug_logging_stays_off_stdout(self, runner):
        result = invoke(runner, "1a2b\n3c4d\n", '--log-level', 'debug')
        assert result.exit_code == 0
        assert result.stdout == "0629f2ef\n"


class TestCliProcessBackend:
    """Run the real program, one OS process per unit."""

    def run_program(self, stdin: str, *args, **extra_env):
        env = dict(os.environ)
        env['PYTHONPATH'] = str(project_root)
        env.update(extra_env)
        return subprocess.run(
            [sys.executable, '-m', 'intmul', *args],
            input=stdin.encode('ascii'),
            capture_output=True,
            env=env,
            timeout=120
        )

    def test_single_digits(self):
        completed = self.run_program("f\nf\n")
        assert completed.returncode == 0
        assert completed.stdout == b"e1\n"

    def test_known_product(self):
        completed = self.run_program("1a2b\n3c4d\n")
        assert completed.returncode == 0
        assert completed.stdout == b"0629f2ef\n"

    def test_empty_input(self):
        completed = self.run_program("\n12\n")
        assert completed.returncode == 1
        assert completed.stdout == b""
        assert completed.stderr == b"[intmul]: no input given\n"

    def test_single_digits_padded_despite_node_variable(self):
        completed = self.run_program("2\n3\n", INTMUL_NODE='root/HH')
        assert completed.returncode == 0
        assert completed.stdout == b"06\n"
