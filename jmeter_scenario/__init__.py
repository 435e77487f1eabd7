"""JMeter Scenario - Compile API test scenarios into JMeter JMX test plans."""

__version__ = "1.0.0"

from jmeter_scenario.core.jmx_generator import JMXGenerator
from jmeter_scenario.core.jmx_validator import JMXValidator
from jmeter_scenario.core.scenario_loader import ScenarioLoader
from jmeter_scenario.core.scenario_model import Test

__all__ = [
    "Test",
    "ScenarioLoader",
    "JMXGenerator",
    "JMXValidator",
]
