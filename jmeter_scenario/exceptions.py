"""Custom exceptions for JMeter Scenario.

This module defines the exception hierarchy for the scenario compiler.
All custom exceptions inherit from JMeterScenarioException base class.

The compiler itself absorbs anomalies in the scenario model (invalid entries
are filtered, malformed URLs degrade to empty endpoints). These exceptions
are raised only at the edges: loading files, writing output and checking
generated plans.
"""


class JMeterScenarioException(Exception):
    """Base exception for all JMeter Scenario errors.

    All custom exceptions inherit from this base class to allow catching
    all tool-specific errors.
    """

    pass


# Scenario file exceptions


class ScenarioException(JMeterScenarioException):
    """Base exception for scenario file errors."""

    pass


class ScenarioParseException(ScenarioException):
    """Raised when a scenario file cannot be parsed.

    This exception is raised when:
    - YAML or JSON syntax is invalid
    - File cannot be read
    """

    pass


class ScenarioValidationException(ScenarioException):
    """Raised when a scenario document has the wrong shape.

    This exception is raised when:
    - The document root is not a mapping
    - A list section (scenarioDefinition, requests, headers...) is not a list
    - The settings section holds values of the wrong type
    """

    pass


# JMX exceptions


class JMXGenerationException(JMeterScenarioException):
    """Raised when JMX test plan generation fails.

    This exception is raised when:
    - The input is neither a Test nor an options mapping
    - Failed to write JMX file to disk
    """

    pass


class JMXValidationException(JMeterScenarioException):
    """Raised when a JMX file cannot be checked.

    This exception is raised when:
    - XML parsing fails
    """

    pass
