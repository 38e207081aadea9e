"""Tests for EOP file parsing, loaders and downloads."""

from __future__ import annotations

import math
import os
import re
import time
from pathlib import Path
from unittest.mock import patch

import pytest

from astroframes.constants import AS2RAD, MAS2RAD
from astroframes.conventions import IERSConventions
from astroframes.eop import (
    FINALS_1980_PATTERN,
    FINALS_2000_PATTERN,
    IERS_STANDARD_URL,
    STANDARD_FILENAME,
    DirectoryEOPLoader,
    EOPEntrySet,
    EOPHistoryLoader,
    InMemoryEOPLoader,
    StandardFileLoader,
    download_standard_eop_file,
    parse_standard_file,
    parse_standard_line,
    refresh_cached_eop,
)
from astroframes.errors import EOPDataUnavailableError

CONVENTIONS = IERSConventions.IERS_2010

FULL_LINE = "2311 1 60249.00 I  0.274620 0.000020  0.268283 0.000018  I 0.0113205 0.0000039 -0.3630 0.0029  I     0.293    0.290    -0.045    0.041  0.274569  0.268315  0.0113342     0.238    -0.039  "
NO_LOD_LINE = "24 3 4 60373.00 P  0.026108 0.007892  0.289637 0.008989  P 0.0110535 0.0072179                 P     0.006    0.128    -0.118    0.160                                                     "
NO_CORRECTION_LINE = "241228 60672.00 P  0.173369 0.019841  0.266914 0.028808  P 0.0420038 0.0254096                                                                                                             "
ONLY_MJD_LINE = "241229 60673.00                                                                                                                                                                            "


def _finals_text(first_mjd: int, days: int) -> str:
    """Daily finals lines reusing the values of FULL_LINE."""
    return "".join(
        FULL_LINE[:6] + f"{first_mjd + d:9.2f}" + FULL_LINE[15:] + "\n"
        for d in range(days)
    ) + ONLY_MJD_LINE + "\n"


def _fill(loader) -> EOPEntrySet:
    entries = EOPEntrySet()
    loader.fill_history(CONVENTIONS.nutation_correction_converter(), entries)
    return entries


# ---------------------------------------------------------------------------
# Parsers
# ---------------------------------------------------------------------------


class TestParseStandardLine:
    """Tests for the IERS standard format line parser."""

    def test_full_line(self):
        result = parse_standard_line(FULL_LINE)
        assert result is not None
        mjd, pm_x, pm_y, ut1_utc, lod, c1, c2 = result
        assert mjd == pytest.approx(60249.0)
        assert pm_x == pytest.approx(0.274620 * AS2RAD, rel=1e-10)
        assert pm_y == pytest.approx(0.268283 * AS2RAD, rel=1e-10)
        assert ut1_utc == pytest.approx(0.0113205, rel=1e-10)
        assert lod == pytest.approx(-0.3630e-3, rel=1e-10)
        assert c1 == pytest.approx(0.293 * MAS2RAD, rel=1e-10)
        assert c2 == pytest.approx(-0.045 * MAS2RAD, rel=1e-10)

    def test_prediction_without_lod(self):
        result = parse_standard_line(NO_LOD_LINE)
        assert result is not None
        assert math.isnan(result[4])
        assert result[5] == pytest.approx(0.006 * MAS2RAD, rel=1e-10)

    def test_prediction_without_corrections(self):
        result = parse_standard_line(NO_CORRECTION_LINE)
        assert result is not None
        assert math.isnan(result[4])
        assert math.isnan(result[5])
        assert math.isnan(result[6])

    def test_only_mjd_returns_none(self):
        assert parse_standard_line(ONLY_MJD_LINE) is None

    def test_too_long_returns_none(self):
        assert parse_standard_line(FULL_LINE + "EXTRA") is None

    def test_empty_returns_none(self):
        assert parse_standard_line("") is None

    def test_short_line_is_padded(self):
        line = NO_CORRECTION_LINE.rstrip()
        assert len(line) < 187
        result = parse_standard_line(line)
        assert result is not None
        assert result[0] == pytest.approx(60672.0)


class TestParseStandardFile:
    def test_skips_invalid_lines(self, tmp_path):
        path = tmp_path / "finals.all.iau2000.txt"
        path.write_text(_finals_text(60249, 3))
        rows = parse_standard_file(path)
        assert [row[0] for row in rows] == [60249.0, 60250.0, 60251.0]

    def test_no_valid_lines_raises(self, tmp_path):
        path = tmp_path / "finals.all.iau2000.txt"
        path.write_text(ONLY_MJD_LINE + "\n")
        with pytest.raises(ValueError):
            parse_standard_file(path)

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            parse_standard_file(tmp_path / "missing.txt")


# ---------------------------------------------------------------------------
# Loaders
# ---------------------------------------------------------------------------


class TestInMemoryEOPLoader:
    def test_fills_entries(self, eop_rows):
        entries = _fill(InMemoryEOPLoader(eop_rows))
        assert len(entries) == len(eop_rows)

    def test_empty_raises(self):
        with pytest.raises(EOPDataUnavailableError):
            _fill(InMemoryEOPLoader([]))

    def test_is_history_loader(self):
        assert isinstance(InMemoryEOPLoader([]), EOPHistoryLoader)


class TestStandardFileLoader:
    """Tests for StandardFileLoader."""

    def test_iau2000_file(self, tmp_path):
        path = tmp_path / "finals2000A.all"
        path.write_text(_finals_text(60249, 5))
        entries = _fill(StandardFileLoader(path))
        assert len(entries) == 5
        entry = next(iter(entries))
        assert entry.mjd == 60249.0
        assert entry.ut1_utc == pytest.approx(0.0113205, rel=1e-10)
        assert entry.lod == pytest.approx(-0.3630e-3, rel=1e-10)
        assert entry.dx == pytest.approx(0.293 * MAS2RAD, rel=1e-10)
        assert entry.dy == pytest.approx(-0.045 * MAS2RAD, rel=1e-10)

    def test_iau1980_file(self, tmp_path):
        path = tmp_path / "finals.all"
        path.write_text(_finals_text(60249, 2))
        entry = next(iter(_fill(StandardFileLoader(path, nonrotating=False))))
        assert entry.ddpsi == pytest.approx(0.293 * MAS2RAD, rel=1e-10)
        assert entry.ddeps == pytest.approx(-0.045 * MAS2RAD, rel=1e-10)

    def test_missing_lod_is_zero(self, tmp_path):
        path = tmp_path / "finals2000A.daily"
        path.write_text(NO_LOD_LINE + "\n")
        entry = next(iter(_fill(StandardFileLoader(path))))
        assert entry.lod == 0.0

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(EOPDataUnavailableError):
            _fill(StandardFileLoader(tmp_path / "finals2000A.all"))

    def test_file_without_data_raises(self, tmp_path):
        path = tmp_path / "finals2000A.all"
        path.write_text(ONLY_MJD_LINE + "\n")
        with pytest.raises(EOPDataUnavailableError):
            _fill(StandardFileLoader(path))

    def test_existing_dates_are_kept(self, tmp_path):
        """Entries already in the set take precedence over the file."""
        path = tmp_path / "finals2000A.all"
        path.write_text(_finals_text(60249, 3))
        entries = EOPEntrySet()
        converter = CONVENTIONS.nutation_correction_converter()
        InMemoryEOPLoader([(60250.0, 0.5, 0.0, 0.0, 0.0, 0.0, 0.0)]).fill_history(converter, entries)
        StandardFileLoader(path).fill_history(converter, entries)
        assert len(entries) == 3
        assert [e.ut1_utc for e in entries][1] == 0.5


class TestDirectoryEOPLoader:
    """Tests for DirectoryEOPLoader."""

    def test_matching_files(self, tmp_path):
        for name in ("finals2000A.all", "finals.all.iau2000.txt", "finals.all", "notes.txt"):
            (tmp_path / name).write_text(_finals_text(60249, 2))
        loader = DirectoryEOPLoader(tmp_path, FINALS_2000_PATTERN)
        assert [p.name for p in loader.matching_files()] == ["finals.all.iau2000.txt", "finals2000A.all"]
        old_loader = DirectoryEOPLoader(tmp_path, FINALS_1980_PATTERN, nonrotating=False)
        assert [p.name for p in old_loader.matching_files()] == ["finals.all"]

    def test_merges_files(self, tmp_path):
        (tmp_path / "finals2000A.all").write_text(_finals_text(60249, 3))
        (tmp_path / "finals2000A.daily").write_text(_finals_text(60251, 3))
        entries = _fill(DirectoryEOPLoader(tmp_path, FINALS_2000_PATTERN))
        assert [e.mjd for e in entries] == [60249.0, 60250.0, 60251.0, 60252.0, 60253.0]

    def test_missing_directory(self, tmp_path):
        loader = DirectoryEOPLoader(tmp_path / "nowhere", FINALS_2000_PATTERN)
        assert loader.matching_files() == []
        with pytest.raises(EOPDataUnavailableError):
            _fill(loader)

    def test_no_matching_file_raises(self, tmp_path):
        (tmp_path / "notes.txt").write_text("nothing here\n")
        with pytest.raises(EOPDataUnavailableError):
            _fill(DirectoryEOPLoader(tmp_path, FINALS_2000_PATTERN))

    def test_patterns(self):
        assert re.match(FINALS_1980_PATTERN, "finals.daily")
        assert not re.match(FINALS_1980_PATTERN, "finals2000A.daily")
        assert re.match(FINALS_2000_PATTERN, "finals2000A.data")
        assert not re.match(FINALS_2000_PATTERN, "finals.data")


# ---------------------------------------------------------------------------
# Downloads
# ---------------------------------------------------------------------------


class TestDownloadStandardEOPFile:
    """Tests for download_standard_eop_file."""

    @pytest.mark.ci
    def test_download_success(self, tmp_path: Path) -> None:
        """Actual download from IERS produces a parseable file."""
        dest = tmp_path / STANDARD_FILENAME
        result = download_standard_eop_file(dest)
        assert result.exists()
        assert len(parse_standard_file(result)) > 100

    def test_download_creates_parent_dirs(self, tmp_path: Path) -> None:
        dest = tmp_path / "deep" / "nested" / STANDARD_FILENAME
        with patch("astroframes.eop._download.httpx.Client") as mock_client_cls:
            mock_response = mock_client_cls.return_value.__enter__.return_value.get.return_value
            mock_response.text = "mock eop data\n"
            mock_response.raise_for_status.return_value = None

            result = download_standard_eop_file(dest)

        assert result == dest.resolve()
        assert dest.read_text() == "mock eop data\n"

    def test_download_requests_url(self, tmp_path: Path) -> None:
        with patch("astroframes.eop._download.httpx.Client") as mock_client_cls:
            client = mock_client_cls.return_value.__enter__.return_value
            client.get.return_value.text = ""
            download_standard_eop_file(tmp_path / "f.txt", url="https://example.org/f.txt")

        client.get.assert_called_once_with("https://example.org/f.txt")

    def test_download_default_url(self) -> None:
        assert "iers.org" in IERS_STANDARD_URL
        assert IERS_STANDARD_URL.endswith(STANDARD_FILENAME)


class TestRefreshCachedEOP:
    """Tests for refresh_cached_eop."""

    def test_missing_file_is_downloaded(self, tmp_path: Path) -> None:
        with patch("astroframes.eop._download.download_standard_eop_file") as mock_download:
            mock_download.return_value = tmp_path / STANDARD_FILENAME
            refresh_cached_eop(directory=tmp_path)
        mock_download.assert_called_once_with(tmp_path / STANDARD_FILENAME, url=IERS_STANDARD_URL)

    def test_fresh_file_is_kept(self, tmp_path: Path) -> None:
        path = tmp_path / STANDARD_FILENAME
        path.write_text(_finals_text(60249, 2))
        with patch("astroframes.eop._download.download_standard_eop_file") as mock_download:
            result = refresh_cached_eop(directory=tmp_path)
        mock_download.assert_not_called()
        assert result == path

    def test_stale_file_is_downloaded(self, tmp_path: Path) -> None:
        path = tmp_path / STANDARD_FILENAME
        path.write_text(_finals_text(60249, 2))
        old = time.time() - 30 * 86400.0
        os.utime(path, (old, old))
        with patch("astroframes.eop._download.download_standard_eop_file") as mock_download:
            refresh_cached_eop(max_age_days=7.0, directory=tmp_path)
        mock_download.assert_called_once()

    def test_default_directory(self, tmp_path: Path) -> None:
        """Without a directory the file lands in <cache>/eop."""
        with patch("astroframes.eop._download.download_standard_eop_file") as mock_download:
            refresh_cached_eop()
        called_path = mock_download.call_args.args[0]
        assert called_path == tmp_path / "cache" / "eop" / STANDARD_FILENAME
