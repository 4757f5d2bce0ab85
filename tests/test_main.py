import os

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

import main
from core.config import RunConfig
from tests.conftest import TEST_KEYS


@pytest.fixture
def clean_env(monkeypatch):
    for name in list(os.environ):
        if name.startswith("PRIVATE_KEY_"):
            monkeypatch.delenv(name)
    monkeypatch.setattr(main.BotSettings, "model_config", {**main.BotSettings.model_config, "env_file": None})


@pytest.fixture
def one_wallet_env(clean_env, monkeypatch):
    monkeypatch.setenv("PRIVATE_KEY_1", TEST_KEYS[0])


class TestReadRunConfig:
    """Test suite for startup count input."""

    def test_flags_skip_prompt(self):
        ask = MagicMock()
        args = main.parse_args(["--claims", "3", "--buy", "2"])
        assert main.read_run_config(args, ask=ask) == RunConfig(num_claims=3, num_to_buy=2)
        ask.assert_not_called()

    def test_prompts_for_missing_values(self):
        ask = MagicMock(side_effect=["1", "0"])
        config = main.read_run_config(main.parse_args([]), ask=ask)
        assert config == RunConfig(num_claims=1, num_to_buy=0)
        assert ask.call_count == 2

    def test_invalid_claims_stops_before_second_prompt(self):
        ask = MagicMock(side_effect=["abc", "2"])
        with pytest.raises(ValueError):
            main.read_run_config(main.parse_args([]), ask=ask)
        assert ask.call_count == 1

    def test_negative_buy_rejected(self):
        with pytest.raises(ValueError):
            main.read_run_config(main.parse_args(["--claims", "0", "--buy", "-1"]), ask=MagicMock())


class TestMain:
    """Test suite for the entry point's fatal paths and wiring."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("bad_input", ["-1", "abc"])
    async def test_invalid_input_exits_before_network(self, one_wallet_env, bad_input):
        with patch("main.setup_logging"), \
             patch("main.Prompt.ask", side_effect=[bad_input, "1"]), \
             patch("main.ChainClient") as MockChain, \
             patch("main.NovastroApi") as MockApi:
            code = await main.main([])

        assert code == 1
        MockChain.assert_not_called()
        MockApi.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_wallets_exits(self, clean_env):
        with patch("main.setup_logging"), \
             patch("main.Prompt.ask") as mock_ask, \
             patch("main.ChainClient") as MockChain:
            code = await main.main(["--claims", "1", "--buy", "1"])

        assert code == 1
        mock_ask.assert_not_called()
        MockChain.assert_not_called()

    @pytest.mark.asyncio
    async def test_once_runs_single_cycle_and_cleans_up(self, one_wallet_env):
        scheduler = MagicMock()
        scheduler.run_once = AsyncMock(return_value=[])
        scheduler.scheduler_loop = AsyncMock()

        with patch("main.setup_logging"), \
             patch("main.ChainClient") as MockChain, \
             patch("main.NovastroApi") as MockApi, \
             patch("main.DailyScheduler", return_value=scheduler) as MockScheduler:
            MockChain.return_value.close = AsyncMock()
            MockApi.return_value.close = AsyncMock()
            code = await main.main(["--claims", "2", "--buy", "1", "--once"])

        assert code == 0
        scheduler.run_once.assert_awaited_once()
        scheduler.scheduler_loop.assert_not_awaited()
        MockChain.return_value.close.assert_awaited_once()
        MockApi.return_value.close.assert_awaited_once()

        runner, wallets = MockScheduler.call_args[0][:2]
        assert runner.run_config == RunConfig(num_claims=2, num_to_buy=1)
        assert len(wallets) == 1
