"""Loader for scenario files (YAML or JSON).

A scenario file mirrors the scenario model: a mapping with the Test fields
(``name``, ``scenarioDefinition``, ...) and an optional ``settings`` section
holding CompilerSettings values.

Example file:

    name: Petstore smoke
    settings:
      threads: 5
    scenarioDefinition:
      - name: Pets
        requests:
          - name: List pets
            url: http://localhost:8080/pets?limit=10
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import yaml

from jmeter_scenario.core.scenario_model import Test
from jmeter_scenario.core.settings import CompilerSettings
from jmeter_scenario.exceptions import ScenarioParseException, ScenarioValidationException

logger = logging.getLogger(__name__)

SETTINGS_KEY = "settings"


@dataclass
class LoadedScenario:
    """Scenario file contents.

    Attributes:
        test: Scenario model built from the file
        settings: Compiler settings from the ``settings`` section
        source_path: File the scenario was loaded from (None for in-memory data)
    """

    test: Test
    settings: CompilerSettings
    source_path: Optional[str] = None


class ScenarioLoader:
    """Load scenario files into the scenario model.

    Example:
        >>> loader = ScenarioLoader()
        >>> loaded = loader.load("scenario.yaml")
        >>> print(loaded.test.name)
        'Petstore smoke'
    """

    def load(self, scenario_path: str) -> LoadedScenario:
        """Load a scenario file.

        Args:
            scenario_path: Path to a .yaml, .yml or .json scenario file

        Returns:
            LoadedScenario with the built Test and settings

        Raises:
            FileNotFoundError: Scenario file doesn't exist
            ScenarioParseException: File cannot be read or has invalid syntax
            ScenarioValidationException: Document structure is invalid
        """
        path = Path(scenario_path)

        if not path.exists():
            raise FileNotFoundError(f"Scenario file not found: {scenario_path}")

        data = self._read(path)
        try:
            loaded = self.load_data(data)
        except ScenarioValidationException as e:
            raise ScenarioValidationException(f"{e} (in {scenario_path})") from e

        loaded.source_path = str(path)
        logger.debug(
            "Loaded scenario file %s: %d scenario(s)",
            scenario_path,
            len(loaded.test.scenario_definition),
        )
        return loaded

    def load_data(self, data: Any) -> LoadedScenario:
        """Build a scenario from an already parsed document.

        Args:
            data: Parsed document (mapping)

        Returns:
            LoadedScenario without source path

        Raises:
            ScenarioValidationException: Document structure is invalid
        """
        if not isinstance(data, dict):
            raise ScenarioValidationException(
                f"Invalid scenario format: expected dictionary, got {type(data).__name__}"
            )

        options = dict(data)
        settings = CompilerSettings.from_dict(options.pop(SETTINGS_KEY, None))
        test = Test.from_options(options)

        return LoadedScenario(test=test, settings=settings)

    def _read(self, path: Path) -> Any:
        """Parse file content as JSON (``.json``) or YAML (anything else)."""
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ScenarioParseException(f"Cannot read scenario file {path}: {e}") from e

        if path.suffix.lower() == ".json":
            try:
                return json.loads(content)
            except json.JSONDecodeError as e:
                raise ScenarioParseException(f"Invalid JSON syntax in {path}: {e}") from e

        try:
            return yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ScenarioParseException(f"Invalid YAML syntax in {path}: {e}") from e
