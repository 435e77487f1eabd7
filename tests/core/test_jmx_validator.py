"""Tests for JMX Validator module."""

from pathlib import Path

import pytest

from jmeter_scenario.core.jmx_generator import JMXGenerator
from jmeter_scenario.core.jmx_validator import JMXValidator
from jmeter_scenario.exceptions import JMXValidationException


class TestJMXValidator:
    """Test suite for JMXValidator class."""

    @pytest.fixture
    def validator(self) -> JMXValidator:
        """Create a JMXValidator instance for testing.

        Returns:
            JMXValidator instance
        """
        return JMXValidator()

    @pytest.fixture
    def generated_xml(self, petstore_options) -> str:
        """Render the petstore test with the default generator."""
        return JMXGenerator().to_xml(petstore_options)

    @pytest.fixture
    def minimal_jmx_content(self) -> str:
        """Hand-written plan used to exercise individual checks.

        Returns:
            JMX XML string with one sampler and one assertion
        """
        return """<?xml version="1.0" encoding="UTF-8"?>
<jmeterTestPlan version="1.2" properties="5.0" jmeter="5.2.1">
  <hashTree>
    <TestPlan guiclass="TestPlanGui" testclass="TestPlan" testname="Plan" enabled="true"/>
    <hashTree>
      <ThreadGroup guiclass="ThreadGroupGui" testclass="ThreadGroup" testname="Group" enabled="true">
        <stringProp name="ThreadGroup.num_threads">1</stringProp>
      </ThreadGroup>
      <hashTree>
        <HTTPSamplerProxy guiclass="HttpTestSampleGui" testclass="HTTPSamplerProxy" testname="Ping" enabled="true">
          <stringProp name="HTTPSampler.domain">host</stringProp>
          <stringProp name="HTTPSampler.path">/ping</stringProp>
          <stringProp name="HTTPSampler.method">GET</stringProp>
        </HTTPSamplerProxy>
        <hashTree>
          <ResponseAssertion guiclass="AssertionGui" testclass="ResponseAssertion" testname="Status" enabled="true">
            <collectionProp name="Asserion.test_strings">
              <stringProp name="1">200</stringProp>
            </collectionProp>
          </ResponseAssertion>
          <hashTree/>
        </hashTree>
        <BackendListener guiclass="BackendListenerGui" testclass="BackendListener" testname="Listener" enabled="true"/>
        <hashTree/>
      </hashTree>
    </hashTree>
  </hashTree>
</jmeterTestPlan>
"""

    def test_generated_plan_is_valid(self, validator, generated_xml):
        result = validator.validate_xml(generated_xml)

        assert result["valid"] is True
        assert result["issues"] == []
        assert isinstance(result["recommendations"], list)

    def test_validate_file(self, validator, generated_xml, tmp_path: Path):
        jmx_path = tmp_path / "plan.jmx"
        jmx_path.write_text(generated_xml, encoding="utf-8")

        assert validator.validate(str(jmx_path))["valid"] is True

    def test_minimal_plan_is_valid(self, validator, minimal_jmx_content):
        assert validator.validate_xml(minimal_jmx_content)["issues"] == []

    def test_file_not_found(self, validator, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            validator.validate(str(tmp_path / "missing.jmx"))

    def test_invalid_xml_file(self, validator, tmp_path: Path):
        jmx_path = tmp_path / "broken.jmx"
        jmx_path.write_text("<jmeterTestPlan><hashTree>", encoding="utf-8")

        with pytest.raises(JMXValidationException, match="Invalid XML"):
            validator.validate(str(jmx_path))

    def test_invalid_xml_text(self, validator):
        with pytest.raises(JMXValidationException):
            validator.validate_xml("not xml at all")

    def test_wrong_root(self, validator):
        result = validator.validate_xml("<testPlan/>")

        assert result["valid"] is False
        assert result["issues"] == ["Root element must be 'jmeterTestPlan'"]

    def test_wrong_version_attributes(self, validator, minimal_jmx_content):
        content = minimal_jmx_content.replace('version="1.2"', 'version="1.0"')

        result = validator.validate_xml(content)

        assert "Root attribute 'version' must be '1.2' (found: '1.0')" in result["issues"]

    def test_missing_test_plan(self, validator):
        result = validator.validate_xml('<jmeterTestPlan version="1.2" properties="5.0" jmeter="5.2.1"><hashTree/></jmeterTestPlan>')

        assert result["issues"] == ["Missing TestPlan element"]

    def test_missing_backend_listener(self, validator, minimal_jmx_content):
        content = minimal_jmx_content.replace(
            '<BackendListener guiclass="BackendListenerGui" testclass="BackendListener" testname="Listener" enabled="true"/>\n        <hashTree/>\n',
            "",
        )

        result = validator.validate_xml(content)

        assert result["issues"] == ["ThreadGroup 'Group' must end with a BackendListener"]

    def test_sampler_without_endpoint(self, validator):
        xml = JMXGenerator().to_xml({"name": "No URL"})

        result = validator.validate_xml(xml)

        assert result["valid"] is True
        assert "Sampler 'HTTP Request' has no domain or path. Check that its request URL is absolute" in result["recommendations"]

    def test_malformed_url_plan_is_valid(self, validator):
        xml = JMXGenerator().to_xml(
            {"scenarioDefinition": [{"requests": [{"name": "Broken", "url": "http://host:abc/x", "method": "POST"}]}]}
        )

        result = validator.validate_xml(xml)

        assert result["issues"] == []
        assert any(r.startswith("Sampler 'Broken' has no domain or path") for r in result["recommendations"])

    def test_sampler_without_method(self, validator, minimal_jmx_content):
        content = minimal_jmx_content.replace('<stringProp name="HTTPSampler.method">GET</stringProp>', "")

        result = validator.validate_xml(content)

        assert result["issues"] == ["Sampler 'Ping' missing HTTP method"]

    def test_assertion_without_test_strings(self, validator, minimal_jmx_content):
        content = minimal_jmx_content.replace('<stringProp name="1">200</stringProp>', "")

        result = validator.validate_xml(content)

        assert result["issues"] == ["ResponseAssertion 'Status' has no test strings"]

    def test_recommendations(self, validator, minimal_jmx_content):
        recommendations = validator.validate_xml(minimal_jmx_content)["recommendations"]

        assert "Consider adding response time assertions for performance validation" in recommendations
        assert any("Thread count is low" in r for r in recommendations)
