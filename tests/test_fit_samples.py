from datetime import datetime, timedelta

import pytest
from fitparse.utils import FitParseError

from biopeak.errors import InvalidInput
from biopeak.streams import fit_samples


class FakeRecord:
    def __init__(self, **values):
        self.values = values

    def get_value(self, name):
        return self.values.get(name)


class FakeFitFile:
    records = []

    def __init__(self, fileish):
        pass

    def get_messages(self, name):
        assert name == "record"
        return iter(self.records)


def test_extract_samples_relative_time(monkeypatch):
    start = datetime(2025, 3, 14, 7, 0, 0)
    FakeFitFile.records = [
        FakeRecord(timestamp=start, distance=0.0),
        FakeRecord(timestamp=start + timedelta(seconds=5), distance=None),
        FakeRecord(timestamp=start + timedelta(seconds=10), distance=35.5),
        FakeRecord(timestamp=start + timedelta(seconds=20), distance=70.0),
    ]
    monkeypatch.setattr(fit_samples, "FitFile", FakeFitFile)

    distance, time = fit_samples.extract_samples(b"fit-bytes")

    assert distance == [0.0, 35.5, 70.0]
    assert time == [0.0, 10.0, 20.0]


def test_empty_file():
    with pytest.raises(InvalidInput):
        fit_samples.extract_samples(b"")


def test_unparseable_file(monkeypatch):
    def broken(fileish):
        raise FitParseError("bad header")

    monkeypatch.setattr(fit_samples, "FitFile", broken)
    with pytest.raises(InvalidInput):
        fit_samples.extract_samples(b"not a fit file")


def test_real_parser_rejects_non_fit_bytes():
    with pytest.raises(InvalidInput):
        fit_samples.extract_samples(b"this is a gpx export, not a fit file")
