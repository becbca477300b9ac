from __future__ import annotations

import json
import sys
from pathlib import Path

from loguru import logger

from gkv.logging_config import setup_logging


def test_json_logging_writes_one_object_per_line(tmp_path: Path):
    log_file = tmp_path / "gkv.log"
    setup_logging(level="INFO", json_format=True, log_file=log_file)
    try:
        logger.bind(bucket="b").info("hello {name}", name="world")
        logger.info("braces {kept}")
    finally:
        logger.remove()
        logger.add(sys.stderr)

    lines = log_file.read_text(encoding="utf-8").splitlines()
    first, second = (json.loads(line) for line in lines)
    assert first["message"] == "hello world"
    assert first["level"] == "INFO"
    assert first["bucket"] == "b"
    assert second["message"] == "braces {kept}"
