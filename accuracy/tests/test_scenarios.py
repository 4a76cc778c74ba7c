"""Tests for the built-in scenarios."""

from accuracy.src.fixtures import (
    cross_document_scenario,
    get_all_scenarios,
    get_scenario,
    list_scenarios,
)


class TestScenarios:
    """Tests for scenario lookup and construction."""

    def test_all_scenarios(self):
        names = list_scenarios()
        assert len(names) == 5
        assert len(set(names)) == 5
        assert names[0] == "Exact Duplicate Detection"

    def test_lookup_is_case_insensitive(self):
        scenario = get_scenario("  paraphrase detection ")
        assert scenario is not None
        assert scenario.name == "Paraphrase Detection"

    def test_unknown(self):
        assert get_scenario("nothing") is None

    def test_fresh_instances(self):
        first, second = get_all_scenarios()[0], get_all_scenarios()[0]
        first.existing_notes.clear()
        assert second.existing_notes

    def test_reversed(self):
        scenario = cross_document_scenario()
        reversed_scenario = scenario.reversed()

        assert [d.id for d in reversed_scenario.documents] == ["doc-b", "doc-a"]
        assert [d.id for d in scenario.documents] == ["doc-a", "doc-b"]
        assert reversed_scenario.name.endswith("(reversed)")
        assert reversed_scenario.expected_consolidations == scenario.expected_consolidations

    def test_document_ids_unique(self):
        for scenario in get_all_scenarios():
            ids = [d.id for d in scenario.documents]
            assert len(ids) == len(set(ids))
