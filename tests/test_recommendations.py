# Data Quality Analyzer - Integration Tests: Recommendation Engine
# Record-level findings, rule-based fallback and LLM response handling

import sys
import os
import asyncio
import unittest

# Add parent to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from tests.fakes import FailingCompletionService, FakeCompletionService
from tests.sample_data import SampleDataFactory


def _analysis(rows, file_name="data.csv"):
    from quality_analyzer.ml.data_quality import analyze_dataset
    return analyze_dataset(rows, file_name)


class TestRecordIssues(unittest.TestCase):
    """Tests for extract_record_issues."""

    def test_single_missing_field_is_medium(self):
        from quality_analyzer.ml.recommendations import Priority, extract_record_issues

        rows = [
            {"id": 3, "name": "Finn", "email": "finn@example.com", "age": 52},
            {"id": 4, "name": "Alice", "email": "", "age": 45},
        ]
        issues = extract_record_issues(_analysis(rows))

        self.assertEqual(len(issues), 1)
        self.assertEqual(issues[0].priority, Priority.MEDIUM)
        self.assertEqual(issues[0].user_id, 4)
        self.assertEqual(issues[0].affected_columns, ["email"])
        self.assertEqual(issues[0].issue, "ID 4: Missing email")
        self.assertIn("email", issues[0].suggestion)

    def test_several_missing_fields_is_high(self):
        from quality_analyzer.ml.recommendations import Priority, extract_record_issues

        issues = extract_record_issues(_analysis(SampleDataFactory().customers()))
        by_id = {r.user_id: r for r in issues}

        self.assertEqual(sorted(by_id), [3, 4])
        self.assertEqual(by_id[3].priority, Priority.HIGH)
        self.assertEqual(by_id[3].affected_columns, ["email", "city"])
        self.assertEqual(by_id[3].issue, "ID 3: Missing email, Missing city")
        self.assertEqual(
            by_id[3].suggestion,
            "Add/update the missing fields (email, city) for user ID 3"
        )

    def test_id_column_detection(self):
        from quality_analyzer.ml.recommendations import extract_record_issues, find_id_column

        rows = [{"name": "x", "Customer_ID": "c-1", "note": None}]
        analysis = _analysis(rows)

        self.assertEqual(find_id_column(analysis), "Customer_ID")
        self.assertEqual(extract_record_issues(analysis)[0].user_id, "c-1")

    def test_no_id_column_no_record_issues(self):
        from quality_analyzer.ml.recommendations import extract_record_issues, find_id_column

        rows = [{"identity": 1, "name": ""}, {"identity": 2, "name": "b"}]
        analysis = _analysis(rows)

        self.assertIsNone(find_id_column(analysis))
        self.assertEqual(extract_record_issues(analysis), [])

    def test_rows_without_id_value_skipped(self):
        from quality_analyzer.ml.recommendations import extract_record_issues

        rows = [
            {"id": "", "email": ""},
            {"id": None, "email": ""},
            {"id": 9, "email": ""},
        ]
        issues = extract_record_issues(_analysis(rows))

        self.assertEqual([r.user_id for r in issues], [9])
        self.assertFalse(any("None" in r.issue for r in issues))

    def test_only_preview_rows_are_scanned(self):
        from quality_analyzer.ml.recommendations import extract_record_issues

        rows = [{"id": i, "v": "x"} for i in range(10)] + [{"id": 10, "v": ""}]
        self.assertEqual(extract_record_issues(_analysis(rows)), [])


class TestDefaultRecommendations(unittest.TestCase):
    """Tests for the rule-based generator."""

    def test_thresholds(self):
        from quality_analyzer.ml.recommendations import Priority, default_recommendations

        recommendations = default_recommendations(_analysis(SampleDataFactory().customers()))

        # completeness 93, consistency 75, accuracy 100, validity 90
        self.assertEqual([r.priority for r in recommendations], [Priority.HIGH, Priority.MEDIUM])
        self.assertEqual(
            recommendations[0].issue,
            "Data completeness is 93% with missing values detected"
        )
        self.assertIn("DELETE FROM table_name", recommendations[0].sql_fix)
        self.assertIn("LOWER(TRIM(column_name))", recommendations[1].sql_fix)

    def test_clean_dataset_has_no_recommendations(self):
        from quality_analyzer.ml.recommendations import default_recommendations

        self.assertEqual(default_recommendations(_analysis(SampleDataFactory().clean_numbers())), [])

    def test_deterministic(self):
        from quality_analyzer.ml.recommendations import default_recommendations

        analysis = _analysis(SampleDataFactory().customers())
        self.assertEqual(default_recommendations(analysis), default_recommendations(analysis))


class TestParseRecommendations(unittest.TestCase):
    """Tests for parse_recommendations."""

    def test_array_inside_prose(self):
        from quality_analyzer.ml.recommendations import Priority, parse_recommendations

        text = (
            "Here you go:\n```json\n"
            '[{"priority": "low", "issue": "Casing", "suggestion": "Normalize", '
            '"fixScript": "UPDATE t SET c = LOWER(c);"}]\n```'
        )
        parsed = parse_recommendations(text)

        self.assertEqual(len(parsed), 1)
        self.assertEqual(parsed[0].priority, Priority.LOW)
        self.assertEqual(parsed[0].sql_fix, "UPDATE t SET c = LOWER(c);")

    def test_malformed_responses(self):
        from quality_analyzer.core.exceptions import RecommendationServiceException
        from quality_analyzer.ml.recommendations import parse_recommendations

        bad_responses = [
            "I cannot help with that.",
            "[{priority: High}]",
            "[1, 2, 3]",
            "[]",
            '[{"priority": "Urgent", "issue": "x", "suggestion": "y"}]',
            '[{"priority": "High", "issue": "x"}]',
        ]
        for text in bad_responses:
            with self.assertRaises(RecommendationServiceException):
                parse_recommendations(text)


class TestRecommendationEngine(unittest.TestCase):
    """Tests for RecommendationEngine.recommend."""

    @classmethod
    def setUpClass(cls):
        cls.factory = SampleDataFactory()

    def test_llm_recommendations_follow_record_issues(self):
        from quality_analyzer.ml.recommendations import RecommendationEngine

        service = FakeCompletionService(
            '[{"priority": "High", "issue": "Blank emails", "suggestion": "Collect emails"}]'
        )
        engine = RecommendationEngine(service)
        result = asyncio.run(engine.recommend(_analysis(self.factory.customers(), "customers.csv")))

        self.assertEqual([r.is_record_scoped for r in result], [True, True, False])
        self.assertEqual(result[-1].issue, "Blank emails")

    def test_prompt_contents(self):
        from quality_analyzer.ml.recommendations import RecommendationEngine

        service = FakeCompletionService('[{"priority": "Low", "issue": "a", "suggestion": "b"}]')
        asyncio.run(RecommendationEngine(service).recommend(
            _analysis(self.factory.customers(), "customers.csv")
        ))
        prompt = service.prompts[0]

        self.assertIn("Dataset: customers.csv", prompt)
        self.assertIn("Rows: 6", prompt)
        self.assertIn("Overall Quality Score: 90/100", prompt)
        self.assertIn("- Completeness: 93%", prompt)
        self.assertIn("- Column: city (text): 1 missing values (17%), 3 duplicate values", prompt)
        self.assertIn("- Column: id (integer): No issues", prompt)
        self.assertIn("- ID 4: Missing email", prompt)

    def test_service_failure_falls_back(self):
        from quality_analyzer.core.exceptions import RecommendationServiceException
        from quality_analyzer.ml.recommendations import RecommendationEngine, default_recommendations

        analysis = _analysis(self.factory.customers())
        failures = [
            FailingCompletionService(RecommendationServiceException("timed out")),
            FailingCompletionService(ConnectionError("network down")),
            FakeCompletionService("not json at all"),
        ]
        for service in failures:
            result = asyncio.run(RecommendationEngine(service).recommend(analysis))
            dataset_level = [r for r in result if not r.is_record_scoped]
            self.assertEqual(dataset_level, default_recommendations(analysis))

    def test_without_service_is_rule_based(self):
        from quality_analyzer.ml.recommendations import RecommendationEngine

        analysis = _analysis(self.factory.customers())
        first = asyncio.run(RecommendationEngine().recommend(analysis))
        second = asyncio.run(RecommendationEngine().recommend(analysis))

        self.assertEqual(first, second)
        self.assertEqual(len(first), 4)

    def test_factory_without_api_key(self):
        from quality_analyzer.core.config import OpenAIConfig
        from quality_analyzer.ml.recommendations import get_recommendation_engine

        self.assertIsNone(get_recommendation_engine().llm_service)
        self.assertIsNone(get_recommendation_engine(OpenAIConfig(api_key="")).llm_service)


class TestRecommendationSerialization(unittest.TestCase):

    def test_optional_keys_omitted(self):
        from quality_analyzer.ml.recommendations import Priority, Recommendation

        data = Recommendation(Priority.LOW, "issue", "fix").to_dict()
        self.assertEqual(data, {"priority": "Low", "issue": "issue", "suggestion": "fix"})

    def test_record_scoped_round_trip(self):
        from quality_analyzer.ml.recommendations import Priority, Recommendation

        original = Recommendation(
            Priority.HIGH, "ID 7: Missing a", "Add a", user_id=7, affected_columns=["a"]
        )
        data = original.to_dict()

        self.assertEqual(data["userId"], 7)
        self.assertEqual(data["affectedColumns"], ["a"])
        self.assertEqual(Recommendation.from_dict(data), original)


def test_engine_with_fixture_service(customer_analysis, fake_llm):
    """Fixture-based check that record issues precede the service's list."""
    from quality_analyzer.ml.recommendations import Priority, RecommendationEngine

    result = asyncio.run(RecommendationEngine(fake_llm).recommend(customer_analysis))

    assert [r.user_id for r in result[:2]] == [3, 4]
    assert result[2].priority == Priority.HIGH
    assert result[2].suggestion == "Collect emails"
    assert len(fake_llm.prompts) == 1


if __name__ == '__main__':
    unittest.main()
