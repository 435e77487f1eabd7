"""JMX Generator compiling the scenario model into JMeter test plans.

This module provides the JMXGenerator class which walks a Test and emits
one Thread Group per Scenario and one HTTP Sampler per Request, with
Header Managers, arguments or bodies, Response/Duration Assertions and a
Backend Listener per Thread Group.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Union

from jmeter_scenario.core.base_config import BaseConfig
from jmeter_scenario.core.jmx_elements import (
    BackendListener,
    HeaderManager,
    HTTPSamplerArguments,
    HTTPSamplerProxy,
    JMeterTestPlan,
    ResponseAssertion,
    ResponseCodeAssertion,
    ResponseDataAssertion,
    ResponseHeadersAssertion,
    TestPlan,
    ThreadGroup,
)
from jmeter_scenario.core.jmx_request import JMXRequest
from jmeter_scenario.core.scenario_model import (
    AssertionCondition,
    KeyValue,
    Regex,
    RegexSubject,
    Request,
    Scenario,
    Test,
)
from jmeter_scenario.core.settings import CompilerSettings
from jmeter_scenario.exceptions import JMXGenerationException

logger = logging.getLogger(__name__)

BACKEND_LISTENER_NAME = "API Backend Listener"

# Regex assertion subject -> ResponseAssertion node type
ASSERTION_NODES: dict[RegexSubject, type[ResponseAssertion]] = {
    RegexSubject.RESPONSE_CODE: ResponseCodeAssertion,
    RegexSubject.RESPONSE_DATA: ResponseDataAssertion,
    RegexSubject.RESPONSE_HEADERS: ResponseHeadersAssertion,
}


@dataclass
class GenerationStats:
    """Counters collected while compiling one test plan."""

    thread_groups: int = 0
    samplers: int = 0
    header_managers: int = 0
    arguments: int = 0
    bodies: int = 0
    assertions: int = 0
    duration_assertions: int = 0

    def to_dict(self) -> dict[str, int]:
        """Convert to dictionary for JSON serialization."""
        return {
            "thread_groups": self.thread_groups,
            "samplers": self.samplers,
            "header_managers": self.header_managers,
            "arguments": self.arguments,
            "bodies": self.bodies,
            "assertions": self.assertions,
            "duration_assertions": self.duration_assertions,
        }


def valid_only(configs: Optional[list[BaseConfig]]) -> list[BaseConfig]:
    """Keep the entries whose validity predicate holds, in order."""
    return [config for config in configs or [] if config.is_valid()]


class JMXGenerator:
    """Compiles scenario model Tests into JMeter JMX test plans.

    The generated plan has the following structure:
    - jmeterTestPlan / hashTree (root)
    - Test Plan (named after the test)
    - Thread Group per scenario, followed by a Backend Listener
    - HTTP Sampler per request, owning its Header Manager and Assertions

    The generator holds only settings, so one instance may compile any
    number of tests, from several threads.

    Example:
        >>> generator = JMXGenerator()
        >>> xml = generator.to_xml({"name": "Smoke", "scenarioDefinition": [...]})
    """

    def __init__(self, settings: Optional[CompilerSettings] = None) -> None:
        """Initialize the JMX Generator.

        Args:
            settings: Thread group and listener settings (defaults if None)
        """
        self.settings = settings or CompilerSettings()

    def build(self, test: Union[Test, Mapping[str, Any]]) -> JMeterTestPlan:
        """Compile a test into an unrendered JMX node tree."""
        plan, _ = self._compile(self._coerce_test(test))
        return plan

    def to_xml(self, test: Union[Test, Mapping[str, Any]]) -> str:
        """Compile a test and render it as a JMX document.

        Args:
            test: Test entity, or an options mapping to build one from

        Returns:
            JMX text starting with the XML declaration

        Raises:
            JMXGenerationException: If test is neither a Test nor a mapping
        """
        return self.build(test).to_xml()

    def to_jmx(self, test: Union[Test, Mapping[str, Any]]) -> dict[str, str]:
        """Compile a test into a named JMX document.

        Returns:
            {"name": "<test name>.jmx", "xml": <JMX text>}
        """
        test = self._coerce_test(test)
        return {"name": f"{test.name}.jmx", "xml": self.build(test).to_xml()}

    def generate(self, test: Union[Test, Mapping[str, Any]], output_path: str) -> dict[str, Any]:
        """Compile a test and write the JMX file.

        Args:
            test: Test entity, or an options mapping to build one from
            output_path: Path where to save the JMX file

        Returns:
            Dictionary with generation results:
            {
                "success": bool,
                "jmx_path": str,
                "thread_groups_created": int,
                "samplers_created": int,
                "header_managers_added": int,
                "assertions_added": int,
                "summary": str
            }

        Raises:
            JMXGenerationException: If the input is invalid or the file
                cannot be written
        """
        try:
            plan, stats = self._compile(self._coerce_test(test))
            xml_string = plan.to_xml()

            output_file = Path(output_path)
            output_file.parent.mkdir(parents=True, exist_ok=True)
            output_file.write_text(xml_string, encoding="utf-8")

            assertions_added = stats.assertions + stats.duration_assertions
            summary = (
                f"Generated JMX test plan with {stats.thread_groups} thread groups, "
                f"{stats.samplers} HTTP samplers, {stats.header_managers} header managers "
                f"and {assertions_added} assertions."
            )
            logger.info(summary)

            return {
                "success": True,
                "jmx_path": str(output_file.absolute()),
                "thread_groups_created": stats.thread_groups,
                "samplers_created": stats.samplers,
                "header_managers_added": stats.header_managers,
                "assertions_added": assertions_added,
                "stats": stats.to_dict(),
                "summary": summary,
            }

        except Exception as e:
            if isinstance(e, JMXGenerationException):
                raise
            raise JMXGenerationException(f"Failed to generate JMX file: {e}") from e

    def _coerce_test(self, test: Union[Test, Mapping[str, Any]]) -> Test:
        if isinstance(test, Test):
            return test
        if isinstance(test, Mapping):
            return Test.from_options(test)
        raise JMXGenerationException(
            f"Cannot compile {type(test).__name__}: expected Test or options mapping"
        )

    def _compile(self, test: Test) -> tuple[JMeterTestPlan, GenerationStats]:
        stats = GenerationStats()
        test_plan = TestPlan(test.name)

        for scenario in test.scenario_definition:
            test_plan.put(self._create_thread_group(scenario, stats))

        jmeter_test_plan = JMeterTestPlan(self.settings.jmeter_version)
        jmeter_test_plan.put(test_plan)

        logger.debug("Compiled test %r: %s", test.name, stats.to_dict())
        return jmeter_test_plan, stats

    def _create_thread_group(self, scenario: Scenario, stats: GenerationStats) -> ThreadGroup:
        thread_group = ThreadGroup(
            scenario.name,
            threads=self.settings.threads,
            ramp_time=self.settings.ramp_time,
            loops=self.settings.loops,
            on_sample_error=self.settings.on_sample_error,
        )
        stats.thread_groups += 1

        for request in scenario.requests:
            thread_group.put(self._create_sampler(request, stats))

        # Listener always comes after every sampler of the group
        thread_group.put(BackendListener(BACKEND_LISTENER_NAME, self.settings.listener_classname))
        return thread_group

    def _create_sampler(self, request: Request, stats: GenerationStats) -> HTTPSamplerProxy:
        sampler = HTTPSamplerProxy(request.name, JMXRequest.from_request(request))
        stats.samplers += 1

        self._add_request_header(sampler, request, stats)

        if not request.method:
            logger.warning("Request %r has no method; arguments and body omitted", request.name)
        elif request.is_get():
            self._add_request_arguments(sampler, request, stats)
        else:
            self._add_request_body(sampler, request, stats)

        self._add_request_assertions(sampler, request, stats)
        return sampler

    def _add_request_header(
        self, sampler: HTTPSamplerProxy, request: Request, stats: GenerationStats
    ) -> None:
        headers = valid_only(request.headers)
        if headers:
            sampler.put_request_header(HeaderManager(f"{request.name or ''} Headers".lstrip(), headers))
            stats.header_managers += 1

    def _add_request_arguments(
        self, sampler: HTTPSamplerProxy, request: Request, stats: GenerationStats
    ) -> None:
        arguments = valid_only(request.parameters)
        if arguments:
            sampler.add_request_arguments(HTTPSamplerArguments(arguments))
            stats.arguments += 1

    def _add_request_body(
        self, sampler: HTTPSamplerProxy, request: Request, stats: GenerationStats
    ) -> None:
        body = request.body
        if body is None:
            logger.warning("Request %r has no body; body omitted", request.name)
            return

        if body.is_kv():
            # Form-encoded: valid pairs only, node emitted even when empty
            sampler.add_request_body(HTTPSamplerArguments(valid_only(body.kvs)), raw=False)
        else:
            # Raw, Form Data and unrecognised types: one unnamed entry
            raw_entry = KeyValue(name="", value=body.raw)
            sampler.add_request_body(HTTPSamplerArguments([raw_entry], always_encode=False), raw=True)
        stats.bodies += 1

    def _add_request_assertions(
        self, sampler: HTTPSamplerProxy, request: Request, stats: GenerationStats
    ) -> None:
        assertions = request.assertions
        if assertions is None:
            return

        for regex in valid_only(assertions.regex):
            assertion = self._create_assertion(regex)
            if assertion is None:
                logger.warning(
                    "Unsupported regex assertion subject %r in request %r; assertion skipped",
                    regex.subject,
                    request.name,
                )
                continue
            sampler.put_response_assertion(assertion)
            stats.assertions += 1

        duration = assertions.duration
        if duration is not None and duration.is_valid():
            sampler.put_duration_assertion(duration.type.value, duration.value)
            stats.duration_assertions += 1

    def _create_assertion(self, regex: Regex) -> Optional[ResponseAssertion]:
        # Match mode is fixed: the expression is written as a full regex
        try:
            node_type = ASSERTION_NODES[RegexSubject(regex.subject)]
        except ValueError:
            return None
        return node_type(regex.description, AssertionCondition.MATCH, regex.expression)
