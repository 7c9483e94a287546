"""Tests for reader configuration."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from chain_tailer.reader import (
    DEFAULT_MAX_HISTORY_LENGTH,
    DEFAULT_ONLY_IRREVERSIBLE,
    DEFAULT_START_AT_BLOCK,
    ActionReader,
    ReaderConfig,
)

from .conftest import MockChain


class TestReaderConfigDefaults:
    """Tests for default configuration values."""

    def test_defaults(self) -> None:
        """Defaults start at block 1, follow the latest head, keep 600 blocks."""
        config = ReaderConfig()

        assert config.start_at_block == DEFAULT_START_AT_BLOCK == 1
        assert config.only_irreversible is DEFAULT_ONLY_IRREVERSIBLE is False
        assert config.max_history_length == DEFAULT_MAX_HISTORY_LENGTH == 600

    def test_reader_takes_values_from_config(self, chain: MockChain) -> None:
        """A new reader derives its initial position from the config."""
        reader = ActionReader(
            adapter=chain,
            config=ReaderConfig(start_at_block=7, only_irreversible=True, max_history_length=9),
        )

        assert reader.start_at_block == 7
        assert reader.current_block_number == 6
        assert reader.only_irreversible
        assert reader.max_history_length == 9
        assert reader.head_block_number == 0
        assert reader.current_block is None

    def test_reader_default_config(self, chain: MockChain) -> None:
        """A reader without config uses the defaults."""
        reader = ActionReader(adapter=chain)

        assert reader.current_block_number == 0
        assert reader.max_history_length == 600


class TestReaderConfigValidation:
    """Tests for configuration validation."""

    def test_accepts_camel_case(self) -> None:
        """Configuration can be loaded from camelCase keys."""
        config = ReaderConfig.model_validate(
            {"startAtBlock": -5, "onlyIrreversible": True, "maxHistoryLength": 10}
        )

        assert config.start_at_block == -5
        assert config.only_irreversible
        assert config.max_history_length == 10

    def test_negative_start_allowed(self) -> None:
        """Negative start blocks select tailing."""
        assert ReaderConfig(start_at_block=-1).start_at_block == -1

    def test_zero_start_rejected(self) -> None:
        """Block 0 is neither a block nor a tail offset."""
        with pytest.raises(ValidationError, match="start_at_block"):
            ReaderConfig(start_at_block=0)

    @pytest.mark.parametrize("max_history_length", [0, -1])
    def test_non_positive_history_rejected(self, max_history_length: int) -> None:
        """History must hold at least one block."""
        with pytest.raises(ValidationError):
            ReaderConfig(max_history_length=max_history_length)

    def test_strict_types(self) -> None:
        """Strings are not coerced to integers."""
        with pytest.raises(ValidationError):
            ReaderConfig(start_at_block="5")  # type: ignore[arg-type]

    def test_unknown_fields_rejected(self) -> None:
        """Typos in configuration keys are errors."""
        with pytest.raises(ValidationError):
            ReaderConfig(max_history=10)  # type: ignore[call-arg]

    def test_frozen(self) -> None:
        """Configuration cannot be modified after creation."""
        config = ReaderConfig()

        with pytest.raises(ValidationError):
            config.start_at_block = 5  # type: ignore[misc]
