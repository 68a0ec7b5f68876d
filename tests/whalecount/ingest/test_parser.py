"""Tests for the whale count page parser."""

from datetime import date

import pytest
from bs4 import BeautifulSoup

from whalecount.ingest.canonical import ParsedObservation
from whalecount.ingest.parser import ParseStats, WhaleCountParser
from whalecount.reports.models import ReportStatus

SOURCE_URL = "https://newportwhales.com/whalecount.html"


def _soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def _counts(report) -> dict[str, int]:
    return {o.species_id: o.individuals for o in report.observations}


@pytest.fixture
def parser(species_resolver) -> WhaleCountParser:
    return WhaleCountParser(species_resolver)


class TestParseDate:
    """Test date column parsing."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("8/12/2025", date(2025, 8, 12)),
            ("04/26/2025", date(2025, 4, 26)),
            ("  1/2/2024 ", date(2024, 1, 2)),
        ],
    )
    def test_parses_month_day_year(self, parser, text, expected):
        """Should accept one- or two-digit month and day with a four-digit year."""
        assert parser.parse_date(text) == expected

    @pytest.mark.parametrize("text", [None, "", "   "])
    def test_blank_raises(self, parser, text):
        """Should reject blank input."""
        with pytest.raises(ValueError, match="null or blank"):
            parser.parse_date(text)

    @pytest.mark.parametrize("text", ["2025-08-12", "8/12/25", "13/45/2025", "2/30/2025", "Aug 12"])
    def test_malformed_raises(self, parser, text):
        """Should reject other formats and impossible dates."""
        with pytest.raises(ValueError, match="Unable to parse date"):
            parser.parse_date(text)


class TestParseTours:
    """Test tour count parsing."""

    def test_parses_trimmed_integer(self, parser):
        """Should parse a whole number surrounded by whitespace."""
        assert parser.parse_tours(" 14 ") == 14

    @pytest.mark.parametrize("text", [None, "", " "])
    def test_blank_raises(self, parser, text):
        """Should reject blank input."""
        with pytest.raises(ValueError, match="null or blank"):
            parser.parse_tours(text)

    @pytest.mark.parametrize(
        "text", ["n/a", "-1", "1.5", "twelve", "2147483648", "99999999999999999999"]
    )
    def test_malformed_raises(self, parser, text):
        """Should reject anything that is not a storable non-negative whole number."""
        with pytest.raises(ValueError, match="Unable to parse tours"):
            parser.parse_tours(text)

    def test_largest_storable_count(self, parser):
        """Should accept the largest count an INTEGER column holds."""
        assert parser.parse_tours("2147483647") == 2147483647


class TestParseStatus:
    """Test status classification."""

    @pytest.mark.parametrize("text", ["Bad Weather", "bad weather", "  BAD WEATHER  "])
    def test_bad_weather(self, parser, text):
        """Should classify 'bad weather' in any case as bad weather."""
        assert parser.parse_status(text) == ReportStatus.BAD_WEATHER

    @pytest.mark.parametrize("text", [None, "", "4 Fin Whales", "Bad weather, 2 Orcas"])
    def test_everything_else_is_ok(self, parser, text):
        """Should classify any other text as ok."""
        assert parser.parse_status(text) == ReportStatus.OK


class TestParseObservations:
    """Test observation tokenization."""

    def test_thousands_separator_is_not_a_split(self, parser):
        """Should read '5,130 common dolphin' as one observation of 5130."""
        observations = parser.parse_observations("5,130 common dolphin")

        assert observations == [ParsedObservation("common-dolphin", 5130)]

    def test_splits_on_comma_before_count(self, parser):
        """Should split two items separated by a comma."""
        observations = parser.parse_observations("3 Humpback Whales, 2 Fin Whales")

        assert {o.species_id: o.individuals for o in observations} == {
            "humpback-whale": 3,
            "fin-whale": 2,
        }

    def test_mixed_row_with_unresolvable_species(self, parser):
        """Should keep resolvable species and count the unresolvable one."""
        stats = ParseStats()

        observations = parser.parse_observations(
            "5 Minke Whales, 1 Bryde's Whale, 1 Mola Mola, 1 Blue Shark, 5,130 Common Dolphin",
            stats,
        )

        assert {o.species_id: o.individuals for o in observations} == {
            "minke-whale": 5,
            "brydes-whale": 1,
            "sunfish": 1,
            "common-dolphin": 5130,
        }
        assert stats.segments_unresolved == 1
        assert stats.unresolved_labels == ["blue shark"]

    def test_one_resolvable_one_unresolvable(self, parser):
        """Should return exactly the resolvable observation without raising."""
        observations = parser.parse_observations("2 Orcas, 7 Sea Lions")

        assert observations == [ParsedObservation("orca", 2)]

    def test_strips_trailing_punctuation_from_label(self, parser):
        """Should ignore punctuation trailing the species label."""
        observations = parser.parse_observations("4 Fin Whales!, 2 Gray Whales.")

        assert {o.species_id for o in observations} == {"fin-whale", "gray-whale"}

    def test_normalizes_description_before_splitting(self, parser):
        """Should handle irregular spacing, case and curly apostrophes."""
        observations = parser.parse_observations("  12   RISSO\u2019S DOLPHINS , 3 orca ")

        assert {o.species_id: o.individuals for o in observations} == {
            "rissos-dolphin": 12,
            "orca": 3,
        }

    def test_malformed_segments_are_dropped(self, parser):
        """Should drop segments that do not start with a count."""
        stats = ParseStats()

        observations = parser.parse_observations("lots of dolphins, 3 Orcas", stats)

        assert observations == [ParsedObservation("orca", 3)]
        assert stats.segments_malformed == 1

    def test_comma_only_count_is_dropped(self, parser):
        """Should drop a segment whose count has no digits."""
        stats = ParseStats()

        observations = parser.parse_observations(", orca", stats)

        assert observations == []
        assert stats.segments_malformed + stats.segments_bad_count == 1

    def test_oversized_count_is_dropped(self, parser):
        """Should drop a segment whose count cannot be stored."""
        stats = ParseStats()

        observations = parser.parse_observations("99999999999999999999 Fin Whales, 3 Orcas", stats)

        assert observations == [ParsedObservation("orca", 3)]
        assert stats.segments_bad_count == 1

    def test_largest_storable_count_is_kept(self, parser):
        """Should keep a count right at the INTEGER limit."""
        stats = ParseStats()

        observations = parser.parse_observations("2,147,483,647 Common Dolphin", stats)

        assert observations == [ParsedObservation("common-dolphin", 2147483647)]
        assert stats.segments_bad_count == 0

    def test_repeated_species_counts_are_added(self, parser):
        """Should merge two segments that resolve to the same species."""
        observations = parser.parse_observations("2 Humpback Whales, 1 Humpback")

        assert observations == [ParsedObservation("humpback-whale", 3)]

    @pytest.mark.parametrize("text", [None, "", "   "])
    def test_blank_description_yields_nothing(self, parser, text):
        """Should return no observations for an empty cell."""
        assert parser.parse_observations(text) == []


class TestSelectCountsTable:
    """Test locating the counts table."""

    def test_finds_table_after_recent_counts_heading(self, parser, whalecount_html):
        """Should pick the table immediately following the 'Recent Counts' heading."""
        table = parser.select_counts_table(_soup(whalecount_html))

        assert table is not None
        assert "8/12/2025" in table.get_text()

    def test_falls_back_to_header_columns(self, parser):
        """Should find the table by its header cells when the heading is missing."""
        html = """
        <table><tr><th>Species</th><th>Total</th></tr></table>
        <table class="data-table">
          <tr><th>Date</th><th>Tours</th><th>Mammals Viewed</th></tr>
          <tr><td>8/1/2025</td><td>6</td><td>3 Orcas</td></tr>
        </table>
        """

        table = parser.select_counts_table(_soup(html))

        assert table is not None
        assert "8/1/2025" in table.get_text()

    def test_heading_without_adjacent_table_uses_fallback(self, parser):
        """Should ignore a heading whose next element is not a table."""
        html = """
        <h3>Recent Counts</h3>
        <p>Updated daily.</p>
        <table><tr><th>DATE</th><th>TOURS</th><th>SIGHTINGS</th></tr></table>
        """

        table = parser.select_counts_table(_soup(html))

        assert table is not None
        assert "SIGHTINGS" in table.get_text()

    def test_returns_none_when_no_table_matches(self, parser):
        """Should return None for a page without a counts table."""
        html = "<h3>Season Totals</h3><table><tr><th>Species</th></tr></table>"

        assert parser.select_counts_table(_soup(html)) is None


class TestParsePage:
    """Test whole-page parsing."""

    def test_end_to_end_fixture_row(self, parser, whalecount_html):
        """Should parse the 8/12/2025 row into four resolved observations."""
        reports = parser.parse(_soup(whalecount_html), SOURCE_URL)
        report = next(r for r in reports if r.date == date(2025, 8, 12))

        assert report.tours == 14
        assert report.status == ReportStatus.OK
        assert report.source_url == SOURCE_URL
        assert _counts(report) == {
            "fin-whale": 4,
            "sunfish": 1,
            "common-dolphin": 2855,
            "bottlenose-dolphin": 195,
        }
        assert [o.species_id for o in report.observations] == sorted(_counts(report))

    def test_bad_weather_row(self, parser, whalecount_html):
        """Should produce a bad weather report with no observations."""
        reports = parser.parse(_soup(whalecount_html), SOURCE_URL)
        report = next(r for r in reports if r.date == date(2025, 4, 26))

        assert report.status == ReportStatus.BAD_WEATHER
        assert report.tours == 0
        assert report.observations == ()

    def test_malformed_rows_are_skipped_and_counted(self, parser, whalecount_html):
        """Should skip rows with a bad date or tour count without failing the page."""
        result = parser.parse_page(_soup(whalecount_html), SOURCE_URL)

        assert [r.date for r in result.reports] == [
            date(2025, 8, 12),
            date(2025, 8, 11),
            date(2025, 8, 10),
            date(2025, 4, 26),
        ]
        assert result.stats.rows_seen == 6
        assert result.stats.rows_skipped == 2
        assert result.stats.unresolved_labels == ["blue shark"]

    def test_oversized_tours_row_is_skipped(self, parser):
        """Should skip a row whose tour count cannot be stored and keep the rest."""
        html = """
        <h3>Recent Counts</h3>
        <table>
          <tr><td>8/12/2025</td><td>99999999999999999999</td><td>4 Fin Whales</td></tr>
          <tr><td>8/11/2025</td><td>5</td><td>3 Fin Whales</td></tr>
        </table>
        """

        result = parser.parse_page(_soup(html), SOURCE_URL)

        assert [r.date for r in result.reports] == [date(2025, 8, 11)]
        assert _counts(result.reports[0]) == {"fin-whale": 3}
        assert result.stats.rows_skipped == 1

    def test_header_rows_and_short_rows(self, parser):
        """Should ignore header rows and skip rows with fewer than three cells."""
        html = """
        <h3>Recent Counts</h3>
        <table>
          <tr><th>DATE</th><th>TOURS</th><th>MAMMALS VIEWED</th></tr>
          <tr><td colspan="3">Counts resume in spring</td></tr>
          <tr><td>3/2/2025</td><td>5</td><td>20 Gray Whales</td></tr>
        </table>
        """

        result = parser.parse_page(_soup(html), SOURCE_URL)

        assert len(result.reports) == 1
        assert _counts(result.reports[0]) == {"gray-whale": 20}
        assert result.stats.rows_seen == 2
        assert result.stats.rows_skipped == 1

    def test_bad_weather_ignores_other_text(self, parser):
        """Should never attach observations to a bad weather day."""
        html = """
        <h3>Recent Counts</h3>
        <table>
          <tr><td>1/5/2025</td><td>0</td><td> Bad Weather </td><td>2 Orcas</td></tr>
        </table>
        """

        [report] = parser.parse(_soup(html), SOURCE_URL)

        assert report.status == ReportStatus.BAD_WEATHER
        assert report.observations == ()

    def test_missing_table_returns_empty_list(self, parser):
        """Should treat a page without the table as no data rather than an error."""
        assert parser.parse(_soup("<html><body><p>Coming soon</p></body></html>"), SOURCE_URL) == []
