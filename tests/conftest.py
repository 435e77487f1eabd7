"""Shared pytest fixtures for all tests."""

import json
from pathlib import Path

import pytest


@pytest.fixture
def petstore_options() -> dict:
    """Options mapping for a two-scenario test.

    Returns:
        Dictionary mirroring the scenario model
    """
    return {
        "name": "Petstore",
        "projectId": "p-1",
        "scenarioDefinition": [
            {
                "name": "Browse",
                "requests": [
                    {
                        "name": "List pets",
                        "url": "http://petstore.local:8080/pets?limit=10",
                        "method": "GET",
                        "parameters": [
                            {"name": "limit", "value": "10"},
                            {"name": "", "value": ""},
                        ],
                        "headers": [{"name": "Accept", "value": "application/json"}],
                        "assertions": {
                            "regex": [
                                {
                                    "subject": "Response Code",
                                    "expression": "^200$",
                                    "description": "Status is 200",
                                }
                            ],
                            "duration": {"value": 500},
                        },
                    },
                    {
                        "name": "Get pet",
                        "url": "https://petstore.local/pets/1",
                    },
                ],
            },
            {
                "name": "Adopt",
                "requests": [
                    {
                        "name": "Login",
                        "url": "http://host:8080/api/login?x=1",
                        "method": "POST",
                        "body": {"type": "Raw", "raw": '{"a":1}'},
                    }
                ],
            },
        ],
    }


@pytest.fixture
def scenario_yaml(tmp_path: Path) -> Path:
    """Create a YAML scenario file with a settings section.

    Returns:
        Path to the scenario file
    """
    content = """name: Petstore smoke
settings:
  threads: 5
  rampup: 10
scenarioDefinition:
  - name: Pets
    requests:
      - name: List pets
        url: http://localhost:8080/pets?limit=10
        headers:
          - name: Accept
            value: application/json
      - name: Create pet
        url: http://localhost:8080/pets
        method: POST
        body:
          type: KeyValue
          kvs:
            - name: name
              value: Rex
        assertions:
          regex:
            - subject: Response Code
              expression: "^201$"
              description: Created
"""
    path = tmp_path / "petstore.yaml"
    path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture
def scenario_json(tmp_path: Path, petstore_options: dict) -> Path:
    """Create a JSON scenario file from petstore_options.

    Returns:
        Path to the scenario file
    """
    path = tmp_path / "petstore.json"
    path.write_text(json.dumps(petstore_options), encoding="utf-8")
    return path
