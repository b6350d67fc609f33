"""Shared test configuration and fixtures."""

import pytest
from dotenv import load_dotenv

from mdsync.config import ROOT
from mdsync.sync.blocks import BlockTransformer

# Same .env the library reads, so MDSYNC_* overrides apply to tests too
load_dotenv(ROOT / ".env")


@pytest.fixture(name="transformer")
def fixture_transformer() -> BlockTransformer:
    """A block transformer with the default markdown-it parser."""
    return BlockTransformer()
