# Copyright 2026 The PyQuo Authors
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Tests for the logging port and its adapters."""

from __future__ import annotations

import logging
from typing import Any

import pytest

from pyquo.config import Config
from pyquo.logging import LoggingPort, StdlibLoggingAdapter, StructlogAdapter, configure_logging


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    logging.getLogger("pyquo.composing").setLevel(logging.NOTSET)


class TestLoggingPortProtocol:
    def test_conforming_class_is_instance(self):
        class FakeLogging:
            def configure(self, config: Any) -> None:
                pass

            def get_logger(self, name: str) -> Any:
                pass

            def set_level(self, name: str, level: str) -> None:
                pass

        assert isinstance(FakeLogging(), LoggingPort)

    def test_non_conforming_class_is_not_instance(self):
        class Incomplete:
            def get_logger(self, name: str) -> Any:
                pass

        assert not isinstance(Incomplete(), LoggingPort)

    @pytest.mark.parametrize("adapter_cls", [StructlogAdapter, StdlibLoggingAdapter])
    def test_adapters_implement_port(self, adapter_cls):
        assert isinstance(adapter_cls(), LoggingPort)


@pytest.mark.parametrize("adapter_cls", [StructlogAdapter, StdlibLoggingAdapter])
class TestAdapterConfigure:
    def test_defaults(self, adapter_cls):
        adapter = adapter_cls()
        adapter.configure(Config({}))
        assert adapter._root_level == "INFO"
        assert adapter._format == "console"
        assert adapter._module_levels == {}

    def test_reads_root_level_and_format(self, adapter_cls):
        adapter = adapter_cls()
        adapter.configure(Config({"pyquo": {"logging": {"level": {"root": "debug"}, "format": "JSON"}}}))
        assert adapter._root_level == "DEBUG"
        assert adapter._format == "json"
        assert logging.getLogger().level == logging.DEBUG

    def test_flat_module_levels(self, adapter_cls):
        adapter = adapter_cls()
        adapter.configure(Config({"pyquo": {"logging": {"level": {"pyquo.composing": "DEBUG"}}}}))
        assert adapter._module_levels == {"pyquo.composing": "DEBUG"}
        assert logging.getLogger("pyquo.composing").level == logging.DEBUG

    def test_nested_module_levels(self, adapter_cls):
        adapter = adapter_cls()
        adapter.configure(Config({"pyquo": {"logging": {"level": {"pyquo": {"composing": "warning"}}}}}))
        assert adapter._module_levels == {"pyquo.composing": "WARNING"}
        assert logging.getLogger("pyquo.composing").level == logging.WARNING

    def test_unknown_level_falls_back_to_info(self, adapter_cls):
        adapter = adapter_cls()
        adapter.set_level("pyquo.composing", "chatty")
        assert logging.getLogger("pyquo.composing").level == logging.INFO


class TestStdlibLoggingAdapter:
    def test_structured_calls_render_key_values(self, caplog):
        logger = StdlibLoggingAdapter().get_logger("pyquo.test")
        with caplog.at_level(logging.INFO, logger="pyquo.test"):
            logger.info("composed", left="A", right="B")
        assert "composed | left=A right=B" in caplog.text

    def test_plain_event(self, caplog):
        logger = StdlibLoggingAdapter().get_logger("pyquo.test")
        with caplog.at_level(logging.WARNING, logger="pyquo.test"):
            logger.warning("no collection")
        assert caplog.records[-1].getMessage() == "no collection"


class TestStructlogAdapter:
    def test_get_logger_is_usable(self):
        adapter = StructlogAdapter()
        adapter.configure(Config({}))
        logger = adapter.get_logger("pyquo.test")
        assert callable(getattr(logger, "info", None))
        assert callable(getattr(logger, "debug", None))


class TestConfigureLogging:
    def test_defaults_to_structlog(self):
        assert isinstance(configure_logging(), StructlogAdapter)

    def test_uses_given_adapter(self):
        adapter = StdlibLoggingAdapter()
        assert configure_logging(Config({"pyquo": {"logging": {"level": {"root": "WARNING"}}}}), adapter) is adapter
        assert adapter._root_level == "WARNING"
