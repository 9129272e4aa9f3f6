import logging
import os
import shutil
import tempfile
import unittest

from click.testing import CliRunner

from betsim.cli import cli


class TestCli(unittest.TestCase):

    def setUp(self):
        self.runner = CliRunner()
        self.tmp_dir = tempfile.mkdtemp()
        self.env = {'BETSIM_OUTPUT_DIR': self.tmp_dir, 'BETSIM_LOG_JSON': 'false'}

    def tearDown(self):
        # Handlers are bound to the runner's streams
        logging.getLogger("betsim").handlers.clear()
        shutil.rmtree(self.tmp_dir, ignore_errors=True)

    def record_files(self):
        return [name for name in os.listdir(self.tmp_dir) if name.endswith('.csv')]

    def test_run(self):
        result = self.runner.invoke(
            cli, ['run', '--strategy', 'red', '--balance', '100', '--stake', '1', '--max-rounds', '10'], env=self.env
        )
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn('10 rounds recorded', result.output)
        self.assertIn('Strategy: red', result.output)

        files = self.record_files()
        self.assertEqual(len(files), 1)
        self.assertTrue(files[0].startswith('red-'))
        with open(os.path.join(self.tmp_dir, files[0]), encoding='utf-8') as f:
            lines = f.read().splitlines()
        self.assertEqual(len(lines), 10)
        self.assertEqual(lines[0].split(', ')[:2], ['100', '1'])

    def test_run_uses_environment_defaults(self):
        env = dict(self.env, BETSIM_STRATEGY='random-split', BETSIM_MAX_ROUNDS='5')
        result = self.runner.invoke(cli, ['run'], env=env)
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertTrue(self.record_files()[0].startswith('random-split-'))

    def test_invalid_config_exits_78(self):
        result = self.runner.invoke(cli, ['run'], env=dict(self.env, BETSIM_STAKE='0'))
        self.assertEqual(result.exit_code, 78)
        self.assertIn('BETSIM_STAKE', result.output)
        self.assertIn('BS100', result.output)

    def test_stake_not_below_balance_exits_78(self):
        result = self.runner.invoke(cli, ['run', '--balance', '5', '--stake', '5'], env=self.env)
        self.assertEqual(result.exit_code, 78)
        self.assertEqual(self.record_files(), [])

    def test_options_override_invalid_environment(self):
        env = dict(self.env, BETSIM_STAKE='50', BETSIM_STARTING_BALANCE='20', BETSIM_STRATEGY='martingale')
        result = self.runner.invoke(
            cli, ['run', '--balance', '1000', '--stake', '5', '--strategy', 'odd', '--max-rounds', '4'], env=env
        )
        self.assertEqual(result.exit_code, 0, result.output)
        files = self.record_files()
        self.assertEqual(len(files), 1)
        with open(os.path.join(self.tmp_dir, files[0]), encoding='utf-8') as f:
            self.assertTrue(f.readline().startswith('1000, 5, '))

    def test_bad_amount_is_usage_error(self):
        result = self.runner.invoke(cli, ['run', '--stake=-3'], env=self.env)
        self.assertEqual(result.exit_code, 2)

    def test_unwritable_output_exits_74(self):
        missing = os.path.join(self.tmp_dir, 'missing')
        result = self.runner.invoke(cli, ['run', '--output-dir', missing, '--max-rounds', '3'], env=self.env)
        self.assertEqual(result.exit_code, 74)
        self.assertIn('BS200', result.output)

    def test_missing_output_dir_from_environment_exits_74(self):
        env = dict(self.env, BETSIM_OUTPUT_DIR=os.path.join(self.tmp_dir, 'missing'))
        result = self.runner.invoke(cli, ['run', '--max-rounds', '3'], env=env)
        self.assertEqual(result.exit_code, 74)

    def test_menu(self):
        # stake 10, max rounds 5, run, quit
        result = self.runner.invoke(cli, ['menu'], input='3\n10\n4\n5\n5\n6\n', env=self.env)
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn('Rounds Played: 5', result.output)
        self.assertIn('Bye', result.output)
        self.assertEqual(len(self.record_files()), 1)

    def test_menu_runs_twice_into_separate_files(self):
        env = dict(self.env, BETSIM_MAX_ROUNDS='3', BETSIM_STRATEGY='red')
        result = self.runner.invoke(cli, ['menu'], input='5\n5\n6\n', env=env)
        self.assertEqual(result.exit_code, 0, result.output)
        files = sorted(self.record_files())
        self.assertEqual(len(files), 2)
        for name in files:
            with open(os.path.join(self.tmp_dir, name), encoding='utf-8') as f:
                lines = f.read().splitlines()
            self.assertEqual(len(lines), 3)
            self.assertTrue(lines[0].startswith('500, 5, '))

    def test_menu_rejects_stake_above_balance_and_continues(self):
        result = self.runner.invoke(cli, ['menu'], input='3\n600\n5\n6\n', env=self.env)
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn('must be smaller than the starting balance', result.output)
        self.assertEqual(self.record_files(), [])

    def test_check_rng(self):
        result = self.runner.invoke(cli, ['check-rng', '--draws', '1000', '--alpha', '1e-9'], env=self.env)
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn('Wheel: 37 outcomes', result.output)
        self.assertIn('Bet target: 49 outcomes', result.output)

    def test_check_rng_ignores_bankroll_settings(self):
        env = dict(self.env, BETSIM_STAKE='600', BETSIM_OUTPUT_DIR='/nonexistent')
        result = self.runner.invoke(cli, ['check-rng', '--draws', '1000', '--alpha', '1e-9'], env=env)
        self.assertEqual(result.exit_code, 0, result.output)

    def test_check_rng_rejects_small_samples(self):
        result = self.runner.invoke(cli, ['check-rng', '--draws', '10'], env=self.env)
        self.assertEqual(result.exit_code, 2)


if __name__ == '__main__':
    unittest.main()
