"""Scenario model: the entity tree describing one API test.

Test -> Scenario -> Request -> Body / Assertions -> KeyValue / Text /
Regex / ResponseTime. Every entity is built from a plain nested options
mapping through BaseConfig.from_options; defaulting happens at construction
time only.
"""

from dataclasses import dataclass
from enum import Enum, IntFlag
from typing import Any, ClassVar, Optional

from jmeter_scenario.core.base_config import (
    BaseConfig,
    BuildContext,
    list_field,
    option_field,
)


class BodyType(str, Enum):
    """Request body encodings. FORM_DATA is compiled like RAW."""

    KV = "KeyValue"
    FORM_DATA = "Form Data"
    RAW = "Raw"


class AssertionType(str, Enum):
    """Assertion kind tags."""

    TEXT = "Text"
    REGEX = "Regex"
    RESPONSE_TIME = "Response Time"


class RegexSubject(str, Enum):
    """Response part a regex assertion is matched against."""

    RESPONSE_CODE = "Response Code"
    RESPONSE_HEADERS = "Response Headers"
    RESPONSE_DATA = "Response Data"


class AssertionCondition(IntFlag):
    """JMeter ResponseAssertion test_type bit flags."""

    MATCH = 1
    CONTAINS = 1 << 1
    NOT = 1 << 2
    EQUALS = 1 << 3
    SUBSTRING = 1 << 4
    OR = 1 << 5


@dataclass
class KeyValue(BaseConfig):
    """Name/value pair used for headers, parameters and form bodies."""

    name: Optional[str] = None
    value: Optional[Any] = None

    def is_valid(self) -> bool:
        return bool(self.name) or bool(self.value)


@dataclass
class AssertionConfig(BaseConfig):
    """Base for assertion entities; ``type`` is the fixed kind tag."""

    type: ClassVar[AssertionType]


@dataclass
class Text(AssertionConfig):
    """Text assertion (configurable, not compiled)."""

    type: ClassVar[AssertionType] = AssertionType.TEXT

    subject: Optional[str] = None
    condition: Optional[str] = None
    value: Optional[str] = None


@dataclass
class Regex(AssertionConfig):
    """Regular-expression assertion on code, headers or body."""

    type: ClassVar[AssertionType] = AssertionType.REGEX

    subject: Optional[str] = None
    expression: Optional[str] = None
    description: Optional[str] = None

    def is_valid(self) -> bool:
        return bool(self.subject) and bool(self.expression)


@dataclass
class ResponseTime(AssertionConfig):
    """Maximum response duration in milliseconds."""

    type: ClassVar[AssertionType] = AssertionType.RESPONSE_TIME

    value: Optional[Any] = None

    def is_valid(self) -> bool:
        return bool(self.value)


@dataclass
class Assertions(BaseConfig):
    """Assertions attached to a request.

    Attributes:
        text: Text assertions (never compiled)
        regex: Regex assertions, compiled when valid
        duration: Response time assertion, always present after defaulting
    """

    LIST_FIELDS: ClassVar[tuple[tuple[str, type[BaseConfig]], ...]] = (
        ("text", Text),
        ("regex", Regex),
    )

    text: list[Text] = list_field()
    regex: list[Regex] = list_field()
    duration: Optional[ResponseTime] = None

    def init_options(self, options: dict[str, Any], context: BuildContext) -> dict[str, Any]:
        options["duration"] = ResponseTime.from_options(options.get("duration"), context)
        return options


@dataclass
class Body(BaseConfig):
    """Request body, either key/value encoded or raw text."""

    LIST_FIELDS: ClassVar[tuple[tuple[str, type[BaseConfig]], ...]] = (("kvs", KeyValue),)

    type: Optional[str] = None
    raw: Optional[str] = None
    kvs: list[KeyValue] = list_field()

    def is_kv(self) -> bool:
        return self.type == BodyType.KV

    def is_valid(self) -> bool:
        if self.is_kv():
            return any(kv.is_valid() for kv in self.kvs)
        return bool(self.raw)


@dataclass
class Request(BaseConfig):
    """One outbound HTTP request; compiled to a sampler.

    Attributes:
        id: Display identifier assigned from the build context
        name: Sampler name
        url: Absolute URL, decomposed at compile time
        method: HTTP method, "GET" when not supplied
        parameters: Query parameters (used for GET only)
        headers: Request headers
        body: Request body (used for non-GET only)
        assertions: Response assertions
        extract: Placeholder for response extraction rules, never populated
    """

    LIST_FIELDS: ClassVar[tuple[tuple[str, type[BaseConfig]], ...]] = (
        ("parameters", KeyValue),
        ("headers", KeyValue),
    )

    id: Optional[int] = None
    name: Optional[str] = None
    url: Optional[str] = None
    method: Optional[str] = None
    parameters: list[KeyValue] = list_field()
    headers: list[KeyValue] = list_field()
    body: Optional[Body] = None
    assertions: Optional[Assertions] = None
    extract: list[Any] = list_field()

    def init_options(self, options: dict[str, Any], context: BuildContext) -> dict[str, Any]:
        self.id = context.next_id()
        if not options.get("method"):
            options["method"] = "GET"
        options["body"] = Body.from_options(options.get("body"), context)
        options["assertions"] = Assertions.from_options(options.get("assertions"), context)
        return options

    def is_get(self) -> bool:
        return bool(self.method) and self.method.upper() == "GET"


@dataclass
class Scenario(BaseConfig):
    """A group of requests executed together; compiled to a thread group."""

    LIST_FIELDS: ClassVar[tuple[tuple[str, type[BaseConfig]], ...]] = (
        ("parameters", KeyValue),
        ("headers", KeyValue),
        ("requests", Request),
    )

    id: Optional[int] = None
    name: Optional[str] = None
    url: Optional[str] = None
    parameters: list[KeyValue] = list_field()
    headers: list[KeyValue] = list_field()
    requests: list[Request] = list_field()

    def init_options(self, options: dict[str, Any], context: BuildContext) -> dict[str, Any]:
        self.id = context.next_id()
        if not options.get("requests"):
            options["requests"] = [{}]
        return options


@dataclass
class Test(BaseConfig):
    """Root of the scenario model; compiled to one JMeter test plan."""

    __test__ = False  # not a pytest test class

    LIST_FIELDS: ClassVar[tuple[tuple[str, type[BaseConfig]], ...]] = (
        ("scenario_definition", Scenario),
    )

    version: str = "1.0.0"
    id: Optional[str] = None
    name: Optional[str] = None
    project_id: Optional[str] = option_field(alias="projectId")
    scenario_definition: list[Scenario] = list_field(alias="scenarioDefinition")

    def init_options(self, options: dict[str, Any], context: BuildContext) -> dict[str, Any]:
        if not self.get_option(options, "scenario_definition"):
            self.put_option(options, "scenario_definition", [{}])
        return options
