"""Unit tests for marker file reading and writing."""

import pandas as pd
import pytest

from notemarker.core.frame_rates import FRAME_RATES
from notemarker.core.models import CommentRecord, Marker, MarkerColor, OffsetInfo, TimecodeValue
from notemarker.core.timecode_calc import parse
from notemarker.io.marker_files import (
    FileMarkerService,
    format_marker_line,
    markers_to_dataframe,
    read_existing_markers,
    sanitize_text,
    write_markers,
)
from notemarker.utils.exceptions import MarkerFileError, MarkerServiceError


@pytest.fixture
def markers():
    comment = CommentRecord("Jane", parse("00:00:10:00"), "Fix the\tcolor\nplease")
    reply = CommentRecord("John", parse("00:00:10:00"), "Agreed", True)
    return [
        Marker("Jane", parse("01:00:10:00"), comment, comments=comment.text),
        Marker(
            "John (+1.0s)",
            parse("01:00:11:00"),
            reply,
            OffsetInfo(parse("01:00:10:00"), 30, 1.0),
            comments="Agreed",
            color=MarkerColor.RED,
        ),
    ]


class TestReadExistingMarkers:
    def test_csv(self, tmp_path):
        path = tmp_path / "existing.csv"
        path.write_text("Name,Timecode\nVO in,01:00:00:00\nBad,99:00:00:00\nSemi,01:00:10;00\n,\n")

        result = read_existing_markers(path)

        assert [(m.name, str(m.start_location)) for m in result] == [
            ("VO in", "01:00:00:00"),
            ("Semi", "01:00:10:00"),
        ]

    def test_start_location_column(self, tmp_path):
        path = tmp_path / "existing.csv"
        path.write_text("Name,Start Location,Comment\nVO in,01:00:00:00,hello\n")

        assert read_existing_markers(path)[0].start_location == TimecodeValue(1, 0, 0, 0)

    def test_avid_text(self, tmp_path):
        path = tmp_path / "existing.txt"
        path.write_text("VO in\t01:00:00:00\tV1\tBlue\tcomment\t1\t\tBlue\n")

        result = read_existing_markers(path)
        assert result[0].name == "VO in"

    def test_frames_checked_against_profile(self, tmp_path):
        path = tmp_path / "existing.csv"
        path.write_text("Name,Timecode\nLate,01:00:00:27\n")

        assert read_existing_markers(path, FRAME_RATES["25"]) == []
        assert len(read_existing_markers(path, FRAME_RATES["30"])) == 1

    def test_missing_name_column(self, tmp_path):
        path = tmp_path / "existing.csv"
        path.write_text("Title,Timecode\nVO in,01:00:00:00\n")

        with pytest.raises(MarkerFileError) as exc_info:
            read_existing_markers(path)
        assert exc_info.value.column == "Name"

    def test_missing_timecode_column(self, tmp_path):
        path = tmp_path / "existing.csv"
        path.write_text("Name,When\nVO in,01:00:00:00\n")

        with pytest.raises(MarkerFileError):
            read_existing_markers(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_existing_markers(tmp_path / "missing.csv")


class TestWriteMarkers:
    def test_avid_line(self, markers):
        assert format_marker_line(markers[0]) == (
            "Jane\t01:00:10:00\tV1\tBlue\tFix the color please\t1\t\tBlue\n"
        )
        assert format_marker_line(markers[1]).split("\t")[3] == "Red"

    def test_sanitize_text(self):
        assert sanitize_text("a\tb\r\nc  d") == "a b c d"
        assert sanitize_text(None) == ""

    def test_dataframe(self, markers):
        data = markers_to_dataframe(markers)

        assert list(data["Name"]) == ["Jane", "John (+1.0s)"]
        assert list(data["Color"]) == ["Blue", "Red"]
        assert list(data["Reply"]) == [False, True]
        assert list(data["Original Timecode"]) == ["", "01:00:10:00"]
        assert list(data["Offset Frames"]) == [0, 30]

    def test_write_txt(self, tmp_path, markers):
        path = write_markers(markers, tmp_path / "out" / "markers.txt")

        lines = path.read_text(encoding="utf-8").splitlines()
        assert len(lines) == 2
        assert lines[1].startswith("John (+1.0s)\t01:00:11:00\tV1\tRed")

    def test_write_csv(self, tmp_path, markers):
        path = write_markers(markers, tmp_path / "markers.csv")

        data = pd.read_csv(path, dtype=str, keep_default_na=False)
        assert list(data["Timecode"]) == ["01:00:10:00", "01:00:11:00"]

    def test_written_csv_reads_back_as_existing(self, tmp_path, markers):
        path = write_markers(markers, tmp_path / "markers.csv")
        assert [m.name for m in read_existing_markers(path)] == ["Jane", "John (+1.0s)"]

    def test_unsupported_format(self, tmp_path, markers):
        with pytest.raises(MarkerFileError):
            write_markers(markers, tmp_path / "markers.xlsx")


class TestFileMarkerService:
    def test_no_existing_file(self):
        assert FileMarkerService().list_markers() == []

    def test_lists_existing(self, tmp_path):
        path = tmp_path / "existing.csv"
        path.write_text("Name,Timecode\nVO in,01:00:00:00\n")

        assert FileMarkerService(path).list_markers()[0].name == "VO in"

    def test_missing_existing_file(self, tmp_path):
        with pytest.raises(MarkerServiceError) as exc_info:
            FileMarkerService(tmp_path / "missing.csv").list_markers()
        assert exc_info.value.operation == "list_markers"

    def test_batches_accumulate(self, tmp_path, markers):
        output = tmp_path / "markers.txt"
        service = FileMarkerService(output_path=output)

        assert service.create_markers(markers[:1]) == 1
        assert service.create_markers(markers[1:]) == 1

        assert len(service.created) == 2
        assert len(output.read_text(encoding="utf-8").splitlines()) == 2

    def test_bad_output_format(self, tmp_path, markers):
        service = FileMarkerService(output_path=tmp_path / "markers.json")

        with pytest.raises(MarkerServiceError):
            service.create_markers(markers)
        assert service.created == []

    def test_refuses_to_overwrite_existing_file(self, tmp_path):
        path = tmp_path / "timeline.csv"
        path.write_text("Name,Timecode\nVO in,01:00:00:00\n")

        with pytest.raises(MarkerFileError):
            FileMarkerService(path, tmp_path / "." / "timeline.csv")
        assert "VO in" in path.read_text()
