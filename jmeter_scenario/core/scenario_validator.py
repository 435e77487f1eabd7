"""Validator reporting how a scenario will be compiled.

The compiler silently drops invalid entries and degrades malformed URLs.
ScenarioValidator walks the same model and reports each of those decisions
as a structured issue, without changing what gets compiled.
"""

from dataclasses import dataclass
from typing import Optional

from jmeter_scenario.core.jmx_request import JMXRequest
from jmeter_scenario.core.scenario_loader import ScenarioLoader
from jmeter_scenario.core.scenario_model import (
    BodyType,
    KeyValue,
    RegexSubject,
    Request,
    Test,
)
from jmeter_scenario.exceptions import ScenarioParseException, ScenarioValidationException

KNOWN_BODY_TYPES = {body_type.value for body_type in BodyType}
KNOWN_SUBJECTS = {subject.value for subject in RegexSubject}


@dataclass
class ValidationIssue:
    """Single validation issue."""

    level: str  # "error" | "warning" | "info"
    category: str  # "file", "structure", "url", "headers", "parameters", "body", "assertions"
    message: str
    location: Optional[str] = None  # "Scenario > Request"


@dataclass
class ValidationResult:
    """Result of scenario validation."""

    scenario_path: Optional[str]
    test_name: Optional[str]
    is_valid: bool  # True if no errors (warnings and info ok)
    issues: list[ValidationIssue]

    @property
    def errors_count(self) -> int:
        """Count validation errors."""
        return sum(1 for issue in self.issues if issue.level == "error")

    @property
    def warnings_count(self) -> int:
        """Count validation warnings."""
        return sum(1 for issue in self.issues if issue.level == "warning")


class ScenarioValidator:
    """Validate scenarios with structured issue reporting.

    Example:
        >>> validator = ScenarioValidator()
        >>> result = validator.validate_file("scenario.yaml")
        >>> for issue in result.issues:
        ...     print(f"[{issue.level.upper()}] {issue.message}")
    """

    def validate_file(self, scenario_path: str) -> ValidationResult:
        """Load and validate a scenario file.

        Args:
            scenario_path: Path to a YAML or JSON scenario file

        Returns:
            ValidationResult; loading failures are reported as errors

        Raises:
            None - all errors collected in result.issues
        """
        loader = ScenarioLoader()
        try:
            loaded = loader.load(scenario_path)
        except FileNotFoundError as e:
            return self._failed(scenario_path, "file", str(e))
        except ScenarioParseException as e:
            return self._failed(scenario_path, "file", str(e))
        except ScenarioValidationException as e:
            return self._failed(scenario_path, "structure", str(e))

        result = self.validate(loaded.test)
        result.scenario_path = scenario_path
        return result

    def validate(self, test: Test) -> ValidationResult:
        """Validate a built scenario model.

        Args:
            test: Test to inspect

        Returns:
            ValidationResult listing every element the compiler drops or
            degrades
        """
        issues: list[ValidationIssue] = []

        for scenario in test.scenario_definition:
            scenario_label = scenario.name or f"Scenario #{scenario.id}"
            if not scenario.requests:
                issues.append(
                    ValidationIssue(
                        "warning", "structure", "Scenario has no requests", scenario_label
                    )
                )
            for request in scenario.requests:
                location = f"{scenario_label} > {request.name or f'Request #{request.id}'}"
                issues.extend(self._check_request(request, location))

        return ValidationResult(
            scenario_path=None,
            test_name=test.name,
            is_valid=not any(issue.level == "error" for issue in issues),
            issues=issues,
        )

    def _check_request(self, request: Request, location: str) -> list[ValidationIssue]:
        issues: list[ValidationIssue] = []

        if not request.url:
            issues.append(
                ValidationIssue("warning", "url", "Request has no URL; sampler endpoint will be empty", location)
            )
        elif JMXRequest.from_request(request).is_empty:
            issues.append(
                ValidationIssue(
                    "warning",
                    "url",
                    f"Malformed URL '{request.url}'; sampler endpoint will be empty",
                    location,
                )
            )
        elif not request.is_get() and "?" in str(request.url):
            issues.append(
                ValidationIssue(
                    "info",
                    "url",
                    f"Query string of {request.method} request is appended to the sampler path",
                    location,
                )
            )

        issues.extend(self._check_key_values(request.headers, "headers", "Header", location))

        if request.is_get():
            issues.extend(self._check_key_values(request.parameters, "parameters", "Parameter", location))
        else:
            if request.parameters:
                issues.append(
                    ValidationIssue(
                        "info",
                        "parameters",
                        f"Parameters are ignored for {request.method} requests; use the body",
                        location,
                    )
                )
            issues.extend(self._check_body(request, location))

        issues.extend(self._check_assertions(request, location))
        return issues

    def _check_key_values(
        self, key_values: list[KeyValue], category: str, label: str, location: str
    ) -> list[ValidationIssue]:
        return [
            ValidationIssue(
                "info", category, f"{label} #{index} has no name and no value and is dropped", location
            )
            for index, kv in enumerate(key_values, start=1)
            if not kv.is_valid()
        ]

    def _check_body(self, request: Request, location: str) -> list[ValidationIssue]:
        body = request.body
        if body is None:
            return []

        issues: list[ValidationIssue] = []
        if body.type is not None and body.type not in KNOWN_BODY_TYPES:
            issues.append(
                ValidationIssue(
                    "warning", "body", f"Unknown body type '{body.type}'; compiled as raw text", location
                )
            )

        if body.is_kv():
            issues.extend(self._check_key_values(body.kvs, "body", "Body entry", location))
            if not body.is_valid():
                issues.append(
                    ValidationIssue(
                        "warning", "body", "Key/value body has no valid entries; body will be empty", location
                    )
                )
        elif not body.is_valid():
            issues.append(
                ValidationIssue(
                    "warning",
                    "body",
                    f"{request.method} request has an empty raw body",
                    location,
                )
            )
        return issues

    def _check_assertions(self, request: Request, location: str) -> list[ValidationIssue]:
        assertions = request.assertions
        if assertions is None:
            return []

        issues: list[ValidationIssue] = []
        for index, regex in enumerate(assertions.regex, start=1):
            if not regex.is_valid():
                issues.append(
                    ValidationIssue(
                        "warning",
                        "assertions",
                        f"Regex assertion #{index} needs both subject and expression; dropped",
                        location,
                    )
                )
            elif regex.subject not in KNOWN_SUBJECTS:
                issues.append(
                    ValidationIssue(
                        "warning",
                        "assertions",
                        f"Regex assertion #{index} has unsupported subject '{regex.subject}'; dropped",
                        location,
                    )
                )

        if assertions.text:
            issues.append(
                ValidationIssue(
                    "info",
                    "assertions",
                    f"{len(assertions.text)} text assertion(s) are not compiled",
                    location,
                )
            )

        duration = assertions.duration
        if duration is not None and duration.value is not None and not duration.is_valid():
            issues.append(
                ValidationIssue(
                    "info", "assertions", "Response time assertion has no threshold; dropped", location
                )
            )
        return issues

    def _failed(self, scenario_path: str, category: str, message: str) -> ValidationResult:
        return ValidationResult(
            scenario_path=scenario_path,
            test_name=None,
            is_valid=False,
            issues=[ValidationIssue("error", category, message)],
        )
