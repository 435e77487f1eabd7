"""Tests for the option-merging framework."""

import pytest

from jmeter_scenario.core.base_config import BuildContext, IdSequence
from jmeter_scenario.core.scenario_model import KeyValue, Request, Scenario, Test
from jmeter_scenario.exceptions import ScenarioValidationException


class TestIdSequence:
    """Test suite for deterministic id generation."""

    def test_ids_start_at_one(self):
        ids = IdSequence()
        assert [ids.next_id() for _ in range(3)] == [1, 2, 3]

    def test_separate_contexts_do_not_share_ids(self):
        first = BuildContext()
        second = BuildContext()

        assert first.next_id() == 1
        assert first.next_id() == 2
        assert second.next_id() == 1


class TestFromOptions:
    """Test suite for BaseConfig.from_options."""

    def test_none_options_give_defaults(self):
        kv = KeyValue.from_options(None)

        assert kv.name is None
        assert kv.value is None

    def test_scalar_fields_overwritten(self):
        kv = KeyValue.from_options({"name": "Accept", "value": "text/plain"})

        assert kv.name == "Accept"
        assert kv.value == "text/plain"

    def test_instance_returned_unchanged(self):
        kv = KeyValue(name="a", value="b")
        assert KeyValue.from_options(kv) is kv

    def test_caller_options_not_mutated(self):
        options = {"name": "Smoke"}
        Test.from_options(options)

        assert options == {"name": "Smoke"}

    def test_list_fields_built_as_typed_children(self):
        scenario = Scenario.from_options(
            {"headers": [{"name": "X-Trace", "value": "1"}, {"name": "X-Env"}]}
        )

        assert len(scenario.headers) == 2
        assert all(isinstance(h, KeyValue) for h in scenario.headers)
        assert [h.name for h in scenario.headers] == ["X-Trace", "X-Env"]

    def test_list_fields_not_overwritten_directly(self):
        request = Request.from_options({"headers": [{"name": "A"}]})
        # Direct overwrite would have left the raw dict in place
        assert isinstance(request.headers[0], KeyValue)

    def test_non_mapping_options_rejected(self):
        with pytest.raises(ScenarioValidationException, match="expected mapping"):
            KeyValue.from_options(["name", "value"])

    def test_non_list_list_field_rejected(self):
        with pytest.raises(ScenarioValidationException, match="expected list"):
            Scenario.from_options({"requests": {"name": "not a list"}})

    def test_null_list_field_left_empty(self):
        request = Request.from_options({"headers": None})
        assert request.headers == []

    def test_unknown_options_ignored(self):
        kv = KeyValue.from_options({"name": "a", "enabled": True})

        assert kv.name == "a"
        assert not hasattr(kv, "enabled")

    def test_alias_and_field_name_both_accepted(self):
        by_alias = Test.from_options({"projectId": "p-1"})
        by_name = Test.from_options({"project_id": "p-1"})

        assert by_alias.project_id == "p-1"
        assert by_name.project_id == "p-1"

    def test_option_names_cover_fields_and_aliases(self):
        names = Test()._option_names()

        assert {"project_id", "projectId", "scenario_definition", "scenarioDefinition"} <= names
        assert "set" not in names

    def test_default_validity_is_true(self):
        assert Scenario.from_options({}).is_valid()

    def test_shared_context_assigns_ids_in_build_order(self):
        context = BuildContext()
        test = Test.from_options(
            {
                "scenarioDefinition": [
                    {"requests": [{}, {}]},
                    {"requests": [{}]},
                ]
            },
            context,
        )

        first, second = test.scenario_definition
        assert first.id == 1
        assert [r.id for r in first.requests] == [2, 3]
        assert second.id == 4
        assert [r.id for r in second.requests] == [5]
        assert context.next_id() == 6

    def test_separate_builds_restart_ids(self):
        first = Test.from_options({})
        second = Test.from_options({})

        assert first.scenario_definition[0].id == second.scenario_definition[0].id == 1
