"""JMX file validator for JMeter Scenario.

This module checks test plans produced by the JMXGenerator (or edited by
hand afterwards) for the structure the generator guarantees, and suggests
improvements.
"""

import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Dict, List

from jmeter_scenario.exceptions import JMXValidationException

EXPECTED_ROOT_ATTRIBUTES = {"version": "1.2", "properties": "5.0"}


class JMXValidator:
    """Validate JMeter JMX test plans.

    Checks the root element, the Test Plan, the Backend Listener closing
    every Thread Group, sampler endpoints and Response Assertion patterns.
    """

    def validate(self, jmx_path: str) -> Dict:
        """Validate JMX file structure and configuration.

        Args:
            jmx_path: Path to JMX file to validate

        Returns:
            Validation results containing:
            - valid: Whether the JMX file is valid
            - issues: List of problems found
            - recommendations: List of improvement suggestions

        Raises:
            FileNotFoundError: If JMX file doesn't exist
            JMXValidationException: If XML parsing fails
        """
        jmx_file = Path(jmx_path)
        if not jmx_file.exists():
            raise FileNotFoundError(f"JMX file not found: {jmx_path}")

        try:
            root = ET.parse(jmx_path).getroot()
        except ET.ParseError as e:
            raise JMXValidationException(f"Invalid XML in JMX file: {e}") from e

        return self._validate_root(root)

    def validate_xml(self, xml_text: str) -> Dict:
        """Validate a rendered JMX document held in memory.

        Raises:
            JMXValidationException: If XML parsing fails
        """
        try:
            root = ET.fromstring(xml_text.encode("utf-8"))
        except ET.ParseError as e:
            raise JMXValidationException(f"Invalid XML in JMX document: {e}") from e

        return self._validate_root(root)

    def _validate_root(self, root: ET.Element) -> Dict:
        issues: List[str] = []

        issues.extend(self._check_structure(root))
        if root.tag == "jmeterTestPlan":
            issues.extend(self._check_thread_groups(root))
            issues.extend(self._check_samplers(root))
            issues.extend(self._check_assertions(root))

        return {
            "valid": len(issues) == 0,
            "issues": issues,
            "recommendations": self._generate_recommendations(root),
        }

    def _check_structure(self, root: ET.Element) -> List[str]:
        """Check root element, its attributes and the Test Plan.

        Args:
            root: Root XML element

        Returns:
            List of issues found (empty if valid)
        """
        issues: List[str] = []

        if root.tag != "jmeterTestPlan":
            issues.append("Root element must be 'jmeterTestPlan'")
            return issues  # Cannot continue without proper root

        for name, expected in EXPECTED_ROOT_ATTRIBUTES.items():
            found = root.get(name)
            if found != expected:
                issues.append(f"Root attribute '{name}' must be '{expected}' (found: {found!r})")
        if not root.get("jmeter"):
            issues.append("Root attribute 'jmeter' is missing")

        main_tree = root.find("hashTree")
        if main_tree is None:
            issues.append("Missing main hashTree element after jmeterTestPlan")
        elif main_tree.find("TestPlan") is None:
            issues.append("Missing TestPlan element")

        return issues

    def _check_thread_groups(self, root: ET.Element) -> List[str]:
        """Check that each Thread Group's hashTree ends with a Backend Listener."""
        issues: List[str] = []

        for parent in root.iter("hashTree"):
            children = list(parent)
            for idx, child in enumerate(children):
                if child.tag != "ThreadGroup":
                    continue
                name = child.get("testname", "Thread Group")
                group_tree = children[idx + 1] if idx + 1 < len(children) else None
                if group_tree is None or group_tree.tag != "hashTree":
                    issues.append(f"ThreadGroup '{name}' is not followed by a hashTree")
                    continue

                test_elements = [elem for elem in group_tree if elem.tag != "hashTree"]
                if not test_elements or test_elements[-1].tag != "BackendListener":
                    issues.append(f"ThreadGroup '{name}' must end with a BackendListener")

        return issues

    def _check_samplers(self, root: ET.Element) -> List[str]:
        """Check every HTTP sampler has an HTTP method.

        Samplers without an endpoint are reported as recommendations, since
        a request with a missing or malformed URL still compiles to one.

        Args:
            root: Root XML element

        Returns:
            List of issues found (empty if valid)
        """
        issues: List[str] = []

        for idx, sampler in enumerate(root.iter("HTTPSamplerProxy"), 1):
            sampler_name = sampler.get("testname", f"Sampler #{idx}")

            method_elem = sampler.find("stringProp[@name='HTTPSampler.method']")
            if method_elem is None or not method_elem.text:
                issues.append(f"Sampler '{sampler_name}' missing HTTP method")

        return issues

    def _check_assertions(self, root: ET.Element) -> List[str]:
        issues: List[str] = []

        for idx, assertion in enumerate(root.iter("ResponseAssertion"), 1):
            assertion_name = assertion.get("testname", f"Assertion #{idx}")
            strings = assertion.find("collectionProp[@name='Asserion.test_strings']")
            if strings is None or len(strings) == 0:
                issues.append(f"ResponseAssertion '{assertion_name}' has no test strings")

        return issues

    def _generate_recommendations(self, root: ET.Element) -> List[str]:
        """Generate improvement suggestions for the test plan.

        Args:
            root: Root XML element

        Returns:
            List of recommendations
        """
        recommendations: List[str] = []

        samplers = list(root.iter("HTTPSamplerProxy"))
        assertions = list(root.iter("ResponseAssertion"))
        duration_assertions = list(root.iter("DurationAssertion"))

        if not samplers:
            recommendations.append("No HTTP samplers found. Add requests to the scenario")

        for idx, sampler in enumerate(samplers, 1):
            missing = [
                label
                for label, prop in (("domain", "HTTPSampler.domain"), ("path", "HTTPSampler.path"))
                if not sampler.findtext(f"stringProp[@name='{prop}']")
            ]
            if missing:
                sampler_name = sampler.get("testname", f"Sampler #{idx}")
                recommendations.append(
                    f"Sampler '{sampler_name}' has no {' or '.join(missing)}. Check that its request URL is absolute"
                )

        if samplers and not assertions:
            recommendations.append("No assertions found. Consider adding regex assertions to validate responses")

        if assertions and not duration_assertions:
            recommendations.append("Consider adding response time assertions for performance validation")

        if root.find(".//HeaderManager") is None:
            recommendations.append("Consider adding headers (Content-Type, Authorization) to requests")

        thread_group = root.find(".//ThreadGroup")
        if thread_group is not None:
            num_threads_elem = thread_group.find("stringProp[@name='ThreadGroup.num_threads']")
            if num_threads_elem is not None and num_threads_elem.text:
                try:
                    num_threads = int(num_threads_elem.text)
                except ValueError:
                    recommendations.append(f"Thread count '{num_threads_elem.text}' is not a number")
                else:
                    if num_threads < 10:
                        recommendations.append(
                            f"Thread count is low ({num_threads}). Consider increasing for realistic load testing"
                        )

        return recommendations
