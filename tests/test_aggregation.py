import unittest

from civimonitor.aggregation import NO_VALUES_MESSAGE, aggregate, interpret_response
from civimonitor.checks.results import Severity
from civimonitor.models import AggregationConfig


def _check(name, severity_id, title=None, message="msg", is_visible=1):
    return {
        "name": name,
        "title": title or name,
        "message": message,
        "severity_id": severity_id,
        "is_visible": is_visible,
    }


class InterpretResponseTests(unittest.TestCase):
    def setUp(self) -> None:
        self.config = AggregationConfig()

    def test_remote_error_is_critical_with_remote_message(self) -> None:
        result = interpret_response(
            {"is_error": True, "error_message": "auth failed"}, self.config
        )

        self.assertEqual(result.severity, Severity.CRITICAL)
        self.assertEqual(result.summary, "auth failed")

    def test_remote_error_without_message_is_empty(self) -> None:
        result = interpret_response({"is_error": 1}, self.config)

        self.assertEqual(result.severity, Severity.CRITICAL)
        self.assertEqual(result.summary, "")

    def test_remote_error_ignores_values(self) -> None:
        payload = {
            "is_error": True,
            "error_message": "boom",
            "values": [{"name": "checkA"}],
        }

        result = interpret_response(payload, self.config)

        self.assertEqual(result.severity, Severity.CRITICAL)
        self.assertEqual(result.summary, "boom")

    def test_remote_error_wins_over_bad_values(self) -> None:
        payload = {"is_error": 1, "error_message": "auth failed", "values": "x"}

        result = interpret_response(payload, self.config)

        self.assertEqual(result.severity, Severity.CRITICAL)
        self.assertEqual(result.summary, "auth failed")

    def test_error_flag_uses_loose_truthiness(self) -> None:
        cases = [
            (2, True),
            ("yes", True),
            ("1", True),
            (True, True),
            ([1], True),
            (0, False),
            ("0", False),
            ("", False),
            (None, False),
            (False, False),
            ([], False),
        ]
        for flag, is_error in cases:
            with self.subTest(flag=flag):
                result = interpret_response(
                    {"is_error": flag, "error_message": "boom", "values": []},
                    self.config,
                )
                if is_error:
                    self.assertEqual(result.severity, Severity.CRITICAL)
                    self.assertEqual(result.summary, "boom")
                else:
                    self.assertEqual(result.severity, Severity.OK)
                    self.assertEqual(result.summary, "")

    def test_missing_values_is_unknown(self) -> None:
        result = interpret_response({"is_error": False}, self.config)

        self.assertEqual(result.severity, Severity.UNKNOWN)
        self.assertEqual(result.summary, NO_VALUES_MESSAGE)

    def test_undecodable_payload_is_unknown(self) -> None:
        for raw in (None, [], "not json", 42):
            with self.subTest(raw=raw):
                result = interpret_response(raw, self.config)
                self.assertEqual(result.severity, Severity.UNKNOWN)
                self.assertEqual(result.summary, NO_VALUES_MESSAGE)

    def test_values_of_wrong_type_is_unknown(self) -> None:
        result = interpret_response({"values": "nope"}, self.config)

        self.assertEqual(result.severity, Severity.UNKNOWN)
        self.assertEqual(result.summary, NO_VALUES_MESSAGE)

    def test_warning_check(self) -> None:
        payload = {
            "values": [
                {
                    "name": "checkCron",
                    "title": "Cron",
                    "message": "Last run 2 days ago",
                    "severity_id": 3,
                    "is_visible": 1,
                }
            ]
        }

        result = interpret_response(payload, self.config)

        self.assertEqual(result.severity, Severity.WARNING)
        self.assertEqual(result.summary, "Cron: Last run 2 days ago")

    def test_critical_check(self) -> None:
        payload = {
            "values": [
                {
                    "name": "checkCron",
                    "title": "Cron",
                    "message": "Last run 2 days ago",
                    "severity_id": 5,
                    "is_visible": 1,
                }
            ]
        }

        result = interpret_response(payload, self.config)

        self.assertEqual(result.severity, Severity.CRITICAL)
        self.assertEqual(result.summary, "Cron: Last run 2 days ago")

    def test_malformed_record(self) -> None:
        payload = {"values": [{"name": "checkA", "is_visible": 1}]}

        result = interpret_response(payload, self.config)

        self.assertEqual(result.severity, Severity.UNKNOWN)
        self.assertEqual(result.summary, "Missing keys: title, message.")

    def test_excluded_and_below_threshold_is_ok(self) -> None:
        config = AggregationConfig(excluded_names=frozenset({"checkPhpVersion"}))
        payload = {
            "values": [
                _check("checkPhpVersion", 5),
                _check("checkLastCron", 1),
            ]
        }

        result = interpret_response(payload, config)

        self.assertEqual(result.severity, Severity.OK)
        self.assertEqual(result.summary, "")

    def test_mapping_values_are_read_in_order(self) -> None:
        payload = {
            "is_error": 0,
            "values": {
                "7": _check("checkB", 2, title="B"),
                "3": _check("checkA", 4, title="A"),
            },
        }

        result = interpret_response(payload, self.config)

        self.assertEqual(result.severity, Severity.CRITICAL)
        self.assertEqual(result.summary, "B: msg / A: msg")

    def test_same_input_same_result(self) -> None:
        payload = {"values": [_check("checkA", 3), {"name": "checkB"}]}

        first = interpret_response(payload, self.config)
        second = interpret_response(payload, self.config)

        self.assertEqual(first, second)


class AggregateTests(unittest.TestCase):
    def test_empty_is_ok(self) -> None:
        result = aggregate([], AggregationConfig())

        self.assertEqual(result.severity, Severity.OK)
        self.assertEqual(result.summary, "")

    def test_below_warning_threshold_contributes_nothing(self) -> None:
        for warning, critical in ((1, 1), (2, 4), (3, 5), (0, 0)):
            config = AggregationConfig(
                warning_threshold=warning, critical_threshold=critical
            )
            with self.subTest(warning=warning, critical=critical):
                result = aggregate([_check("low", warning - 1)], config)
                self.assertEqual(result.severity, Severity.OK)
                self.assertEqual(result.summary, "")

    def test_excluded_malformed_record_is_silent(self) -> None:
        config = AggregationConfig(excluded_names=frozenset({"checkBroken"}))

        result = aggregate([{"name": "checkBroken"}], config)

        self.assertEqual(result.severity, Severity.OK)
        self.assertEqual(result.summary, "")

    def test_malformed_record_outranks_critical(self) -> None:
        records = [_check("checkA", 5, title="A"), {"title": "B", "message": "m"}]

        result = aggregate(records, AggregationConfig())

        self.assertEqual(result.severity, Severity.UNKNOWN)
        self.assertEqual(result.summary, "A: msg / Missing keys: name.")

    def test_non_mapping_record_is_malformed(self) -> None:
        result = aggregate(["oops"], AggregationConfig())

        self.assertEqual(result.severity, Severity.UNKNOWN)
        self.assertEqual(result.summary, "Missing keys: title, message, name.")

    def test_critical_record_never_lowers_severity(self) -> None:
        base_inputs = [
            [],
            [_check("a", 2)],
            [_check("a", 5)],
            [{"name": "broken"}],
        ]
        config = AggregationConfig()
        for records in base_inputs:
            with self.subTest(records=records):
                before = aggregate(records, config).severity
                after = aggregate(records + [_check("crit", 4)], config).severity
                self.assertGreaterEqual(after, before)
                self.assertGreaterEqual(after, Severity.CRITICAL)

    def test_hidden_checks_follow_show_hidden(self) -> None:
        records = [_check("hidden", 4, title="Hidden", is_visible=0)]

        shown = aggregate(records, AggregationConfig(show_hidden=True))
        hidden = aggregate(records, AggregationConfig(show_hidden=False))

        self.assertEqual(shown.severity, Severity.CRITICAL)
        self.assertEqual(shown.summary, "Hidden: msg")
        self.assertEqual(hidden.severity, Severity.OK)
        self.assertEqual(hidden.summary, "")

    def test_fragments_are_html_escaped(self) -> None:
        records = [_check("x", 3, title="<b>PHP</b>", message="Tom & Jerry's \"cron\"")]

        result = aggregate(records, AggregationConfig())

        self.assertEqual(
            result.summary,
            "&lt;b&gt;PHP&lt;/b&gt;: Tom &amp; Jerry&#039;s &quot;cron&quot;",
        )

    def test_summary_preserves_record_order(self) -> None:
        records = [
            _check("c", 4, title="C"),
            _check("a", 2, title="A"),
            _check("skip", 0, title="Skip"),
            _check("b", 3, title="B"),
        ]

        result = aggregate(records, AggregationConfig())

        self.assertEqual(result.summary, "C: msg / A: msg / B: msg")
        self.assertEqual(result.severity, Severity.CRITICAL)

    def test_exit_code_matches_severity(self) -> None:
        result = aggregate([_check("a", 3)], AggregationConfig())

        self.assertEqual(result.exit_code, 1)


if __name__ == "__main__":
    unittest.main()
