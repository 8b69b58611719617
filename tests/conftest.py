"""
Shared test configuration for m3usieve.
"""

import asyncio
from typing import AsyncGenerator

import pytest
import pytest_asyncio

from m3usieve.checker.http_client import ProbeClient
from m3usieve.config import Config

# ============================================================================
# Pytest Configuration
# ============================================================================


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests for individual components")
    config.addinivalue_line("markers", "integration: Integration tests across modules")


@pytest_asyncio.fixture
async def cleanup_tasks() -> AsyncGenerator[None, None]:
    """Cancel any task a test leaves behind."""
    tasks_before = asyncio.all_tasks()
    yield
    new_tasks = asyncio.all_tasks() - tasks_before

    for task in new_tasks:
        if not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def config(tmp_path) -> Config:
    """Test configuration with short timeouts and paths under tmp_path."""
    config = Config()
    config.checker.timeout = 1.0
    config.checker.concurrency_limit = 4
    config.checker.max_redirects = 3
    config.output.input_dir = tmp_path / "m3u-files"
    config.output.output_dir = tmp_path / "m3u-checked"
    return config


@pytest_asyncio.fixture
async def probe_client(config) -> AsyncGenerator[ProbeClient, None]:
    """Initialized ProbeClient, closed after the test."""
    client = ProbeClient(config)
    await client.initialize()
    yield client
    await client.close()


# ============================================================================
# Playlist Fixtures
# ============================================================================


@pytest.fixture
def alpha_beta_playlist() -> str:
    return "#EXTM3U\n#EXTINF:-1,Alpha\nhttp://a.test/x\n#EXTINF:-1,Beta\nhttp://b.test/y\n"


@pytest.fixture
def mixed_playlist() -> str:
    """Header attributes, directives, a bare stream and a comment between pairs."""
    return (
        '#EXTM3U x-tvg-url="http://epg.test/guide.xml"\n'
        '#EXTINF:-1 tvg-id="one" group-title="News",One News\n'
        "http://one.test/live.m3u8\n"
        "\n"
        "# backup feeds\n"
        "#EXTVLCOPT:http-user-agent=Mozilla\n"
        "#EXTINF:-1,Two Sports\n"
        "https://two.test/stream.ts\n"
        "http://bare.test/radio.mp3\n"
    )
