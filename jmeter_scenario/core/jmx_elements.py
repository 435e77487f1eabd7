"""JMX node library: JMeter test elements and their XML rendering.

Nodes are assembled into a tree first and converted to
``xml.etree.ElementTree`` elements only when the whole plan is rendered.
Two kinds of children exist:

- property children (stringProp, boolProp, elementProp, ...) nested inside
  the element itself, added with ``add`` and the ``*_prop`` helpers
- test-element children (samplers, assertions, listeners, ...) placed in the
  JMeter ``hashTree`` that follows the element, added with ``put``
"""

import re
import xml.etree.ElementTree as ET
from typing import Any, Optional
from xml.dom import minidom
from xml.sax.saxutils import unescape

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'

# Anything outside the XML 1.0 Char production cannot appear in a document
_INVALID_XML_CHARS = re.compile("[^\t\n\r\x20-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]")


def _xml_safe(text: str) -> str:
    return _INVALID_XML_CHARS.sub("", text)


def _to_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    return _xml_safe(str(value))


def java_string_hash(value: str) -> int:
    """Compute Java's String.hashCode(), which JMeter uses for test string names."""
    data = value.encode("utf-16-be")
    h = 0
    for i in range(0, len(data), 2):
        h = (31 * h + int.from_bytes(data[i : i + 2], "big")) & 0xFFFFFFFF
    return h - (1 << 32) if h & 0x80000000 else h


class Element:
    """XML element with JMeter property helpers.

    Args:
        tag: XML tag name
        attributes: XML attributes; values are converted to text
        text: Element text (None renders an empty element)
    """

    def __init__(
        self,
        tag: str,
        attributes: Optional[dict[str, Any]] = None,
        text: Any = None,
    ) -> None:
        self.tag = tag
        self.attributes = {k: _to_text(v) or "" for k, v in (attributes or {}).items()}
        self.text = _to_text(text)
        self.elements: list[Element] = []

    def add(self, element: "Element") -> "Element":
        """Append a property child and return it."""
        self.elements.append(element)
        return element

    def _prop(self, tag: str, name: Any, value: Any, default: Any) -> "Element":
        return self.add(Element(tag, {"name": name}, default if value is None else value))

    def string_prop(self, name: Any, value: Any = None, default: Any = "") -> "Element":
        return self._prop("stringProp", name, value, default)

    def bool_prop(self, name: str, value: Optional[bool] = None, default: bool = False) -> "Element":
        return self._prop("boolProp", name, value, default)

    def int_prop(self, name: str, value: Optional[int] = None, default: int = 0) -> "Element":
        return self._prop("intProp", name, value, default)

    def long_prop(self, name: str, value: Optional[int] = None, default: int = 0) -> "Element":
        return self._prop("longProp", name, value, default)

    def collection_prop(self, name: str) -> "Element":
        return self.add(Element("collectionProp", {"name": name}))

    def element_prop(self, name: str, element_type: str, **attributes: Any) -> "Element":
        return self.add(Element("elementProp", {"name": name, "elementType": element_type, **attributes}))

    def to_etree(self) -> ET.Element:
        """Convert this element and its property children to ElementTree."""
        elem = ET.Element(self.tag, self.attributes)
        if self.text is not None:
            elem.text = self.text
        for child in self.elements:
            elem.append(child.to_etree())
        return elem


class TestElement(Element):
    """Element that owns test-element children in a following hashTree."""

    __test__ = False  # not a pytest test class

    def __init__(
        self,
        tag: str,
        attributes: Optional[dict[str, Any]] = None,
        text: Any = None,
    ) -> None:
        super().__init__(tag, attributes, text)
        self.hash_tree: list[TestElement] = []

    def put(self, test_element: "TestElement") -> "TestElement":
        """Append a test-element child and return it."""
        self.hash_tree.append(test_element)
        return test_element

    def append_to(self, parent: ET.Element) -> None:
        """Append this element and its hashTree to a parent hashTree."""
        parent.append(self.to_etree())
        hash_tree = ET.SubElement(parent, "hashTree")
        for child in self.hash_tree:
            child.append_to(hash_tree)


class DefaultTestElement(TestElement):
    """Test element with the standard guiclass/testclass/testname attributes.

    A None testname falls back to "<tag> Name".
    """

    def __init__(
        self,
        tag: str,
        guiclass: str,
        testclass: str,
        testname: Optional[str] = None,
        enabled: bool = True,
    ) -> None:
        super().__init__(
            tag,
            {
                "guiclass": guiclass,
                "testclass": testclass,
                "testname": f"{tag} Name" if testname is None else testname,
                "enabled": enabled,
            },
        )


class TestPlan(DefaultTestElement):
    """JMeter Test Plan element."""

    def __init__(self, testname: Optional[str] = None, comments: str = "") -> None:
        super().__init__("TestPlan", "TestPlanGui", "TestPlan", testname)
        self.string_prop("TestPlan.comments", comments)
        self.bool_prop("TestPlan.functional_mode", False)
        self.bool_prop("TestPlan.serialize_threadgroups", True)
        self.bool_prop("TestPlan.tearDown_on_shutdown", True)
        variables = self.element_prop(
            "TestPlan.user_defined_variables",
            "Arguments",
            guiclass="ArgumentsPanel",
            testclass="Arguments",
            testname="User Defined Variables",
            enabled=True,
        )
        variables.collection_prop("Arguments.arguments")
        self.string_prop("TestPlan.user_define_classpath", "")


class ThreadGroup(DefaultTestElement):
    """JMeter Thread Group with a Loop Controller."""

    def __init__(
        self,
        testname: Optional[str] = None,
        threads: int = 1,
        ramp_time: int = 1,
        loops: int = 1,
        on_sample_error: str = "continue",
    ) -> None:
        super().__init__("ThreadGroup", "ThreadGroupGui", "ThreadGroup", testname)
        self.string_prop("ThreadGroup.on_sample_error", on_sample_error)
        loop_controller = self.element_prop(
            "ThreadGroup.main_controller",
            "LoopController",
            guiclass="LoopControlPanel",
            testclass="LoopController",
            testname="Loop Controller",
            enabled=True,
        )
        loop_controller.bool_prop("LoopController.continue_forever", False)
        loop_controller.string_prop("LoopController.loops", loops)
        self.string_prop("ThreadGroup.num_threads", threads)
        self.string_prop("ThreadGroup.ramp_time", ramp_time)
        self.bool_prop("ThreadGroup.scheduler", False)
        self.string_prop("ThreadGroup.duration", "")
        self.string_prop("ThreadGroup.delay", "")


class HTTPSamplerArguments(Element):
    """HTTPsampler.Arguments property holding query, form or raw body arguments.

    Args:
        arguments: Objects with ``name`` and ``value`` attributes
        always_encode: Value of HTTPArgument.always_encode for every entry
    """

    def __init__(self, arguments: list[Any], always_encode: bool = True) -> None:
        super().__init__(
            "elementProp",
            {
                "name": "HTTPsampler.Arguments",
                "elementType": "Arguments",
                "guiclass": "HTTPArgumentsPanel",
                "testclass": "Arguments",
                "enabled": True,
            },
        )
        self.arguments = list(arguments)
        collection = self.collection_prop("Arguments.arguments")
        for argument in self.arguments:
            name = argument.name or ""
            entry = collection.add(Element("elementProp", {"name": name, "elementType": "HTTPArgument"}))
            entry.bool_prop("HTTPArgument.always_encode", always_encode)
            entry.bool_prop("HTTPArgument.use_equals", True)
            if name:
                entry.string_prop("Argument.name", name)
            entry.string_prop("Argument.value", argument.value)
            entry.string_prop("Argument.metadata", "=")


class HTTPSamplerProxy(DefaultTestElement):
    """HTTP Request sampler.

    Args:
        testname: Sampler name ("HTTP Request" when empty)
        request: Endpoint fields (protocol, hostname, port, pathname, method);
            missing fields render as empty properties
    """

    def __init__(self, testname: Optional[str], request: Any = None) -> None:
        super().__init__("HTTPSamplerProxy", "HttpTestSampleGui", "HTTPSamplerProxy", testname or "HTTP Request")
        self.request = request
        pathname = getattr(request, "pathname", None)
        self.string_prop("HTTPSampler.domain", getattr(request, "hostname", None))
        self.string_prop("HTTPSampler.port", getattr(request, "port", None))
        self.string_prop("HTTPSampler.protocol", getattr(request, "protocol", None))
        # The XML library escapes text itself; store the decoded path
        self.string_prop("HTTPSampler.path", unescape(pathname) if pathname else None)
        self.string_prop("HTTPSampler.method", getattr(request, "method", None))
        self.string_prop("HTTPSampler.contentEncoding", "UTF-8")
        self.bool_prop("HTTPSampler.follow_redirects", True)
        self.bool_prop("HTTPSampler.use_keepalive", True)

    def add_request_arguments(self, arguments: HTTPSamplerArguments) -> None:
        self.add(arguments)

    def add_request_body(self, body: HTTPSamplerArguments, raw: bool = True) -> None:
        self.bool_prop("HTTPSampler.postBodyRaw", raw)
        self.add(body)

    def put_request_header(self, header_manager: "HeaderManager") -> None:
        self.put(header_manager)

    def put_response_assertion(self, assertion: "ResponseAssertion") -> None:
        self.put(assertion)

    def put_duration_assertion(self, testname: str, duration: Any) -> None:
        self.put(DurationAssertion(testname, duration))


class HeaderManager(DefaultTestElement):
    """HTTP Header Manager.

    Args:
        testname: Element name
        headers: Objects with ``name`` and ``value`` attributes
    """

    def __init__(self, testname: Optional[str], headers: list[Any]) -> None:
        super().__init__("HeaderManager", "HeaderPanel", "HeaderManager", testname)
        self.headers = list(headers)
        collection = self.collection_prop("HeaderManager.headers")
        for header in self.headers:
            entry = collection.add(Element("elementProp", {"name": "", "elementType": "Header"}))
            entry.string_prop("Header.name", header.name)
            entry.string_prop("Header.value", header.value)


class ResponseAssertion(DefaultTestElement):
    """Response Assertion on one response field.

    Args:
        testname: Element name
        test_field: JMeter field selector (e.g. "Assertion.response_code")
        test_type: AssertionCondition bit flags
        value: Pattern to test
        message: Custom failure message
    """

    TEST_FIELD = ""

    def __init__(
        self,
        testname: Optional[str],
        test_type: int,
        value: Any,
        message: Optional[str] = None,
    ) -> None:
        super().__init__("ResponseAssertion", "AssertionGui", "ResponseAssertion", testname)
        self.test_type = int(test_type)
        self.value = "" if value is None else _xml_safe(str(value))
        self.string_prop("Assertion.test_field", self.TEST_FIELD)
        self.bool_prop("Assertion.assume_success", False)
        self.int_prop("Assertion.test_type", self.test_type)
        self.string_prop("Assertion.custom_message", message)
        # "Asserion" is JMeter's own spelling and must be preserved
        strings = self.collection_prop("Asserion.test_strings")
        strings.string_prop(java_string_hash(self.value), self.value)


class ResponseCodeAssertion(ResponseAssertion):
    TEST_FIELD = "Assertion.response_code"


class ResponseDataAssertion(ResponseAssertion):
    TEST_FIELD = "Assertion.response_data"


class ResponseHeadersAssertion(ResponseAssertion):
    TEST_FIELD = "Assertion.response_headers"


class DurationAssertion(DefaultTestElement):
    """Duration Assertion: fails samples slower than ``duration`` ms."""

    def __init__(self, testname: Optional[str], duration: Any) -> None:
        super().__init__("DurationAssertion", "DurationAssertionGui", "DurationAssertion", testname)
        self.duration = duration or 0
        self.string_prop("DurationAssertion.duration", self.duration)


class BackendListener(DefaultTestElement):
    """Backend Listener forwarding sample results to a client class."""

    def __init__(self, testname: str, classname: str) -> None:
        super().__init__("BackendListener", "BackendListenerGui", "BackendListener", testname)
        self.classname = classname
        arguments = self.element_prop(
            "arguments",
            "Arguments",
            guiclass="ArgumentsPanel",
            testclass="Arguments",
            enabled=True,
        )
        arguments.collection_prop("Arguments.arguments")
        self.string_prop("classname", classname)


class JMeterTestPlan(Element):
    """Root ``jmeterTestPlan`` element holding the top-level hashTree."""

    def __init__(self, jmeter_version: str = "5.2.1") -> None:
        super().__init__("jmeterTestPlan", {"version": "1.2", "properties": "5.0", "jmeter": jmeter_version})
        self.test_elements: list[TestElement] = []

    def put(self, test_element: TestElement) -> TestElement:
        self.test_elements.append(test_element)
        return test_element

    def to_etree(self) -> ET.Element:
        root = ET.Element(self.tag, self.attributes)
        hash_tree = ET.SubElement(root, "hashTree")
        for test_element in self.test_elements:
            test_element.append_to(hash_tree)
        return root

    def to_xml(self) -> str:
        """Render the whole plan as text, starting with the XML declaration.

        Returns:
            Pretty-printed XML document with 2-space indentation
        """
        rough_string = ET.tostring(self.to_etree(), encoding="unicode")
        reparsed = minidom.parseString(rough_string)
        pretty_xml = reparsed.documentElement.toprettyxml(indent="  ")
        return f"{XML_DECLARATION}\n{pretty_xml.rstrip()}\n"
