import json
import math

import numpy as np
import pytest

from mapmatch.models import (
    NO_MATCH,
    LocalizationResult,
    LocalizationStatus,
    LocatorSettings,
    MatchResult,
    ProbePoint,
    TemplateProbe,
    ZoneMatch,
)


@pytest.fixture
def probe():
    return TemplateProbe.from_points(
        [ProbePoint(1, 1, 10, 20, 30, 20, 5), (2, 1, 40, 50, 60, 20, 17), (1, 2, 7, 8, 9, 2, 0)],
        width=4,
        height=4,
    )


class TestTemplateProbe:
    def test_iteration_and_indexing(self, probe):
        assert len(probe) == 3
        assert list(probe)[1] == ProbePoint(2, 1, 40, 50, 60, 20, 17)
        assert probe[-1].y == 2
        assert [point.x for point in probe[:2]] == [1, 2]

    def test_column_access(self, probe):
        assert probe.column("grad_mag").tolist() == [5, 17, 0]
        with pytest.raises(KeyError):
            probe.column("alpha")

    def test_points_are_frozen(self, probe):
        assert probe.points.dtype == np.int32
        assert not probe.points.flags.writeable
        with pytest.raises(ValueError):
            probe.points[0, 0] = 3

    def test_source_array_is_not_frozen(self):
        source = np.zeros((2, 7), dtype=np.int32)
        probe = TemplateProbe(source, 3, 3)
        assert source.flags.writeable
        assert probe.points is not source

    def test_rejects_wrong_shape(self):
        with pytest.raises(ValueError):
            TemplateProbe(np.zeros((3, 6), dtype=np.int32), 4, 4)
        with pytest.raises(ValueError):
            TemplateProbe(np.zeros(7, dtype=np.int32), 4, 4)

    def test_empty(self):
        empty = TemplateProbe.empty(5, 6)
        assert empty.is_empty
        assert len(empty) == 0
        assert list(empty) == []
        assert (empty.width, empty.height) == (5, 6)
        assert TemplateProbe.from_points([], 5, 6).is_empty

    def test_repr(self, probe):
        assert repr(probe) == "TemplateProbe(points=3, width=4, height=4)"


def test_match_result_found_and_offset():
    result = MatchResult(4, 7, 1.5, 30)
    assert result.found
    assert result.offset() == (4, 7)

    assert not NO_MATCH.found
    assert NO_MATCH.offset() == (-1, -1)
    assert math.isinf(NO_MATCH.score)


class TestLocatorSettings:
    def test_defaults(self):
        settings = LocatorSettings()
        assert settings.to_dict() == {
            "scale": 1,
            "step": 2,
            "probe_step": 2,
            "consistency_step": 4,
            "gamma": 2.0,
            "luma_threshold": 25,
            "concurrent": False,
            "max_avg_diff": 40.0,
            "min_z_score": 1.0,
            "max_consistency": 15.0,
        }

    @pytest.mark.parametrize(
        "params",
        [
            {"scale": 0},
            {"step": -1},
            {"probe_step": 1.5},
            {"consistency_step": True},
            {"gamma": 0},
            {"luma_threshold": 256},
            {"luma_threshold": -1},
        ],
    )
    def test_invalid_values(self, params):
        with pytest.raises(ValueError):
            LocatorSettings(**params)

    def test_from_mapping_ignores_none_and_rejects_unknown(self):
        settings = LocatorSettings.from_mapping({"step": 3, "gamma": None})
        assert settings.step == 3
        assert settings.gamma == 2.0

        with pytest.raises(ValueError, match="threshold"):
            LocatorSettings.from_mapping({"threshold": 3})

    def test_from_json(self):
        assert LocatorSettings.from_json("  ") == LocatorSettings()
        assert LocatorSettings.from_json('{"scale": 2, "concurrent": true}') == LocatorSettings(scale=2, concurrent=True)
        with pytest.raises(ValueError):
            LocatorSettings.from_json("[1, 2]")
        with pytest.raises(ValueError):
            LocatorSettings.from_json("{broken")


class TestLocalizationResult:
    def test_failed_result(self):
        result = LocalizationResult.failed(LocalizationStatus.EMPTY_PROBE)
        assert not result.located
        assert result.center is None

        payload = result.to_dict()
        assert payload["status"] == "empty_probe"
        assert payload["avg_diff"] is None
        assert payload["candidates"] == []
        json.dumps(payload)

    def test_located_result(self):
        candidate = ZoneMatch("a", MatchResult(5, 6, 2.0, 40), NO_MATCH)
        result = LocalizationResult(
            status=LocalizationStatus.LOCATED,
            zone="a",
            x=10,
            y=12,
            width=30,
            height=20,
            avg_diff=2.0,
            weighted_diff=1.0,
            candidates=(candidate,),
        )

        assert result.located
        assert result.center == (25, 22)
        payload = result.to_dict()
        assert payload["center"] == [25, 22]
        assert payload["candidates"][0]["uniform"] == {"x": 5, "y": 6, "score": 2.0, "matched_points": 40}
        assert payload["candidates"][0]["weighted"]["score"] is None

    def test_status_values_are_strings(self):
        assert LocalizationStatus("no_match") is LocalizationStatus.NO_MATCH
        assert LocalizationStatus.LOCATED == "located"
