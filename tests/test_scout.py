"""
Tests for per-file key extraction.
"""

from keyscrub.core.domain import Indicator
from keyscrub.engine.scout import scout


def _assert_unique(table):
    placeholders = [e.placeholder for e in table]
    values = [e.original_value for e in table]
    assert len(placeholders) == len(set(placeholders))
    assert len(values) == len(set(values))


class TestScout:
    """Test suite for scout()."""

    def test_extracts_each_distinct_address(self, ip_indicator):
        """Should issue one Address placeholder per distinct IP."""
        table = scout("connect to 10.0.0.5 and 10.0.0.55", [ip_indicator], frozenset())

        assert table.as_dict() == {"Address1": "10.0.0.5", "Address2": "10.0.0.55"}
        assert all(e.label == "Address" for e in table)
        _assert_unique(table)

    def test_repeated_value_is_deduplicated(self, ip_indicator):
        """The same value seen twice should produce one entry."""
        table = scout("10.0.0.5 then 10.0.0.5 again", [ip_indicator], frozenset())

        assert table.as_dict() == {"Address1": "10.0.0.5"}

    def test_ignored_values_are_skipped(self, ip_indicator):
        """Content made only of ignored literals should produce no keys."""
        ignore = frozenset({"127.0.0.1", "0.0.0.0"})
        table = scout("127.0.0.1 0.0.0.0 127.0.0.1", [ip_indicator], ignore)

        assert len(table) == 0

    def test_ignored_values_do_not_consume_numbers(self, ip_indicator):
        table = scout("127.0.0.1 10.1.1.1", [ip_indicator], frozenset({"127.0.0.1"}))

        assert table.as_dict() == {"Address1": "10.1.1.1"}

    def test_only_first_group_is_extracted(self):
        """The redaction span is the first capture group, not the whole match."""
        indicator = Indicator.compile(r"user=(\w+)", "Username")
        table = scout("login user=alice ok", [indicator], frozenset())

        assert table.as_dict() == {"Username1": "alice"}

    def test_non_participating_group_is_skipped(self):
        """A match whose first group did not participate adds nothing."""
        indicator = Indicator.compile(r"a(\d)|b", "Digit")
        table = scout("b a1 b", [indicator], frozenset())

        assert table.as_dict() == {"Digit1": "1"}

    def test_indicators_see_original_content(self):
        """Later indicators must match the untransformed text."""
        token = Indicator.compile(r"(secret-\d+)", "Token")
        number = Indicator.compile(r"(\d+)", "Number")

        table = scout("secret-42", [token, number], frozenset())

        assert table.as_dict() == {"Token1": "secret-42", "Number1": "42"}

    def test_indicator_order_sets_numbering(self, ip_indicator, unc_indicator):
        """Indicator order decides allocation order, nothing else."""
        content = r"copy \\server1\share\ to 10.0.0.1"

        forward = scout(content, [unc_indicator, ip_indicator], frozenset())
        backward = scout(content, [ip_indicator, unc_indicator], frozenset())

        assert [e.label for e in forward] == ["Hostname", "Address"]
        assert [e.label for e in backward] == ["Address", "Hostname"]
        assert set(forward.as_dict().values()) == set(backward.as_dict().values())

    def test_same_label_from_two_indicators_shares_counter(self):
        short = Indicator.compile(r"host=(\w+)", "Hostname")
        fqdn = Indicator.compile(r"(\w+\.corp)\b", "Hostname")

        table = scout("host=alpha beta.corp", [short, fqdn], frozenset())

        assert table.as_dict() == {"Hostname1": "alpha", "Hostname2": "beta.corp"}

    def test_empty_content(self, ip_indicator):
        assert len(scout("", [ip_indicator], frozenset())) == 0

    def test_scout_is_pure(self, ip_indicator):
        """Repeated calls should return equal, independent tables."""
        first = scout("10.0.0.1 10.0.0.2", [ip_indicator], frozenset())
        second = scout("10.0.0.1 10.0.0.2", [ip_indicator], frozenset())

        assert first == second
        assert first is not second
        assert not first.frozen
