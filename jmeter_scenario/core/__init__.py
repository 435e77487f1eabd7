"""Core modules for JMeter Scenario."""

from jmeter_scenario.core.base_config import BaseConfig, BuildContext, IdSequence
from jmeter_scenario.core.jmx_generator import GenerationStats, JMXGenerator
from jmeter_scenario.core.jmx_request import JMXRequest
from jmeter_scenario.core.jmx_validator import JMXValidator
from jmeter_scenario.core.scenario_loader import LoadedScenario, ScenarioLoader
from jmeter_scenario.core.scenario_model import (
    AssertionCondition,
    Assertions,
    AssertionType,
    Body,
    BodyType,
    KeyValue,
    Regex,
    RegexSubject,
    Request,
    ResponseTime,
    Scenario,
    Test,
    Text,
)
from jmeter_scenario.core.scenario_validator import (
    ScenarioValidator,
    ValidationIssue,
    ValidationResult,
)
from jmeter_scenario.core.settings import CompilerSettings

__all__ = [
    # scenario model
    "BaseConfig",
    "BuildContext",
    "IdSequence",
    "KeyValue",
    "Body",
    "BodyType",
    "Text",
    "Regex",
    "RegexSubject",
    "ResponseTime",
    "Assertions",
    "AssertionType",
    "AssertionCondition",
    "Request",
    "Scenario",
    "Test",
    # compiler
    "CompilerSettings",
    "JMXRequest",
    "JMXGenerator",
    "GenerationStats",
    # files and checks
    "ScenarioLoader",
    "LoadedScenario",
    "ScenarioValidator",
    "ValidationIssue",
    "ValidationResult",
    "JMXValidator",
]
