# mcp_test_client/testing/suites.py
"""Loading named test suites from JSON files."""
from __future__ import annotations

import json
from pathlib import Path
from typing import List

from mcp_test_client.core.exceptions import SuiteNotFoundError
from mcp_test_client.logging import get_logger
from mcp_test_client.models.test_case import TestSuite

logger = get_logger("mcp_test_client.testing.suites")


class SuiteLoader:
    """
    Resolve a suite name to ``<directory>/<name>.json``.

    A name that is itself a path to an existing ``.json`` file is loaded
    directly.  The file holds either a suite object
    (``{"name": ..., "tests": [...]}``) or a bare list of test cases.
    """

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)

    def resolve(self, suite_name: str) -> Path:
        direct = Path(suite_name)
        if direct.suffix == ".json" and direct.is_file():
            return direct
        candidate = self.directory / f"{suite_name}.json"
        if candidate.is_file():
            return candidate
        raise SuiteNotFoundError(suite_name, str(self.directory))

    def load(self, suite_name: str) -> TestSuite:
        path = self.resolve(suite_name)
        logger.debug("Loading test suite '%s' from %s", suite_name, path)
        data = json.loads(path.read_text(encoding="utf-8"))
        if isinstance(data, list):
            data = {"tests": data}
        data.setdefault("name", path.stem)
        return TestSuite.model_validate(data)

    def available(self) -> List[str]:
        if not self.directory.is_dir():
            return []
        return sorted(p.stem for p in self.directory.glob("*.json"))
