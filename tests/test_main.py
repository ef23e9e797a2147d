"""
Integration tests for the command-line entry point.

These run the whole stack (configuration, file repository, location
strategy, filter engine and clustering) against a temporary deal export.
"""

import logging

import pytest
import yaml

from local_deals.main import async_main, build_parser
from local_deals.utils import logging as deal_logging
from local_deals.utils.logging import LoggingManager

DEALS = [
    {
        "id": 1,
        "title": "Weekend biryani combo",
        "category": "food",
        "city": "Bengaluru",
        "area": "Indiranagar",
        "latitude": 12.9784,
        "longitude": 77.6408,
        "valid_till_date": "2099-01-31",
        "rating": 4.5,
        "is_verified": True,
        "status": "active",
    },
    {
        "id": 2,
        "title": "Haircut and beard trim",
        "category": "salon",
        "city": "Bengaluru",
        "area": "Koramangala",
        "latitude": 12.9352,
        "longitude": 77.6245,
        "rating": 4.1,
        "status": "active",
    },
    {
        "id": 3,
        "title": "Phone screen replacement",
        "category": "electronics",
        "city": "Bengaluru",
        "status": "active",
    },
    {
        "id": 4,
        "title": "Old offer",
        "category": "food",
        "valid_till_date": "2000-01-01",
        "status": "active",
    },
]


@pytest.fixture
def cli_config(temp_dir):
    deals_path = temp_dir / "deals.yaml"
    deals_path.write_text(yaml.safe_dump({"deals": DEALS}), encoding="utf-8")

    config_path = temp_dir / "config.yaml"
    config_path.write_text(
        yaml.safe_dump(
            {
                "repository": {"type": "file", "path": str(deals_path)},
                "system": {"log_level": "WARNING"},
            }
        ),
        encoding="utf-8",
    )
    return config_path


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    names = ["local_deals"] + [f"local_deals.{c}" for c in LoggingManager.COMPONENTS]
    for name in names:
        logger = logging.getLogger(name)
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)
    logging.getLogger("local_deals").setLevel(logging.NOTSET)
    deal_logging._logging_manager = None


def run(cli_config, temp_dir, *extra):
    argv = ["--config", str(cli_config), "--log-dir", str(temp_dir / "logs"), *extra]
    return argv


@pytest.mark.integration
class TestCommandLine:
    """End-to-end runs of the CLI."""

    @pytest.mark.asyncio
    async def test_default_feed(self, cli_config, temp_dir, capsys):
        assert await async_main(run(cli_config, temp_dir)) == 0

        lines = capsys.readouterr().out.splitlines()
        assert lines[0].startswith("Weekend biryani combo | Indiranagar, Bengaluru | Food")
        assert lines[1].startswith("Haircut and beard trim")
        assert lines[2].startswith("Phone screen replacement | Bengaluru")
        assert len(lines) == 3

    @pytest.mark.asyncio
    async def test_near_me_with_device_position(self, cli_config, temp_dir, capsys):
        argv = run(
            cli_config,
            temp_dir,
            "--near-me",
            "--lat",
            "12.9352",
            "--lng",
            "77.6245",
            "--radius",
            "3",
        )

        assert await async_main(argv) == 0

        lines = capsys.readouterr().out.splitlines()
        assert lines == ["Haircut and beard trim | Koramangala, Bengaluru | Beauty & Salon | 0.0 km"]

    @pytest.mark.asyncio
    async def test_category_and_verified_filters(self, cli_config, temp_dir, capsys):
        argv = run(cli_config, temp_dir, "--category", "beauty-salon", "--verified-only")

        await async_main(argv)

        assert capsys.readouterr().out.strip() == "No deals match the current filters."

    @pytest.mark.asyncio
    async def test_map_pins(self, cli_config, temp_dir, capsys):
        await async_main(run(cli_config, temp_dir, "--zoom", "14"))

        lines = capsys.readouterr().out.splitlines()
        assert lines == [
            "Weekend biryani combo @ 12.97840,77.64080",
            "Haircut and beard trim @ 12.93520,77.62450",
        ]

    @pytest.mark.asyncio
    async def test_show_expired(self, cli_config, temp_dir, capsys):
        await async_main(run(cli_config, temp_dir, "--show-expired"))

        out = capsys.readouterr().out
        assert "Old offer" in out
        assert "Expired" in out


def test_parser_rejects_unknown_mode():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["--mode", "newest"])


@pytest.mark.integration
@pytest.mark.asyncio
async def test_zero_radius_is_rejected(cli_config, temp_dir):
    with pytest.raises(ValueError, match="radius_km must be positive"):
        await async_main(run(cli_config, temp_dir, "--radius", "0"))
