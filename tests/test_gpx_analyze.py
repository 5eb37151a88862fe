from dataclasses import replace
from pathlib import Path

import pytest

import gpxtrack.analyze.gpx_analyze as ga
from gpxtrack.config import AnalyzeConfig, GpxTrackConfig, GpxTrackPaths


@pytest.fixture
def fixed_config(tmp_path: Path, monkeypatch):
    cfg = GpxTrackConfig(
        paths=GpxTrackPaths(
            runtime_root=tmp_path,
            work_root=tmp_path / "_work",
            plot_root=tmp_path / "_plots",
        ),
        analyze=AnalyzeConfig(),
        source={},
    )
    monkeypatch.setattr(ga, "load_config", lambda: cfg)
    return cfg


def test_main_prints_track_totals(sample_gpx_path, fixed_config, capsys):
    assert ga.main([str(sample_gpx_path)]) == 0
    out = capsys.readouterr().out
    walk, unnamed = out.split("[track 1]")

    assert "  segments      : 1\n  points        : 4\n" in walk
    assert "  gain (m)      : 25.00\n  loss (m)      : 5.00\n" in walk
    distance = float(walk.split("  distance (m)  : ")[1].split()[0])
    assert distance == pytest.approx(335.5, abs=1.0)

    assert "  segments      : 2\n  points        : 3\n" in unnamed
    assert "  loss (m)      : 500.00\n" in unnamed


def test_main_tsv(sample_gpx_path, fixed_config, capsys):
    rc = ga.main([str(sample_gpx_path), "--tsv"])
    assert rc == 0

    lines = capsys.readouterr().out.strip().splitlines()
    assert lines[0] == ga.TSV_HEADER
    rows = [line.split("\t") for line in lines[1:]]
    assert [(r[1], r[2], r[3], r[4]) for r in rows] == [
        ("0", "Equator Walk", "0", "4"),
        ("1", "No Name", "0", "3"),
        ("1", "No Name", "1", "0"),
    ]


def test_main_text_report(sample_gpx_path, fixed_config, capsys):
    assert ga.main([str(sample_gpx_path)]) == 0
    out = capsys.readouterr().out
    assert "[track 0] Equator Walk" in out
    assert "[track 1] No Name" in out
    assert "gain (m)      : 25.00" in out


def test_main_at_distance(sample_gpx_path, fixed_config, capsys):
    assert ga.main([str(sample_gpx_path), "--at-distance", "0"]) == 0
    out = capsys.readouterr().out
    assert "closest point #0" in out


def test_main_at_distance_out_of_bounds(sample_gpx_path, fixed_config, capsys):
    assert ga.main([str(sample_gpx_path), "--at-distance", "99999999"]) == 1
    assert "cannot locate" in capsys.readouterr().err


def test_main_nearest(sample_gpx_path, fixed_config, capsys):
    rc = ga.main([str(sample_gpx_path), "--nearest", "0,0.002,105", "--segment", "0"])
    assert rc == 0
    assert "nearest (segment 0): point #2 at 0.00 m" in capsys.readouterr().out


def test_main_nearest_every_segment_skips_empty_ones(sample_gpx_path, fixed_config, capsys):
    rc = ga.main([str(sample_gpx_path), "--nearest", "0,0.001,110"])
    assert rc == 0
    captured = capsys.readouterr()
    walk, unnamed = captured.out.split("[track 1]")
    assert "nearest (segment 0): point #1 at 0.00 m" in walk
    assert "nearest (segment 0): point #" in unnamed
    assert "nearest (segment 1)" not in unnamed
    assert captured.err == ""


def test_main_nearest_surface_metric(sample_gpx_path, fixed_config, capsys):
    rc = ga.main([str(sample_gpx_path), "--nearest", "45.001,7", "--metric", "surface"])
    assert rc == 0
    unnamed = capsys.readouterr().out.split("[track 1]")[1]
    assert "nearest (segment 0): point #1 at 0.00 m" in unnamed


def test_main_nearest_explicit_empty_segment_fails(sample_gpx_path, fixed_config, capsys):
    assert ga.main([str(sample_gpx_path), "--nearest", "45,7", "--segment", "1"]) == 1
    assert "segment 1 has no points" in capsys.readouterr().err


def test_default_segment_applies_to_at_distance_only(sample_gpx_path, fixed_config, monkeypatch, capsys):
    cfg = replace(fixed_config, analyze=AnalyzeConfig(default_segment=1))
    monkeypatch.setattr(ga, "load_config", lambda: cfg)

    assert ga.main([str(sample_gpx_path), "--at-distance", "0", "--nearest", "0,0,100"]) == 1
    captured = capsys.readouterr()
    # track 0 has no segment 1, track 1 has an empty one
    assert "cannot locate 0.0 m in segment 1" in captured.err
    assert "nearest (segment 0): point #0 at 0.00 m" in captured.out


def test_main_bad_nearest_argument(sample_gpx_path, fixed_config):
    with pytest.raises(SystemExit):
        ga.main([str(sample_gpx_path), "--nearest", "north,7"])


def test_main_skips_missing_and_invalid_files(tmp_path, sample_gpx_path, fixed_config, capsys):
    bad = tmp_path / "bad.gpx"
    bad.write_text("<gpx>", encoding="utf-8")
    rc = ga.main([str(tmp_path / "missing.gpx"), str(bad), str(sample_gpx_path)])
    assert rc == 1
    captured = capsys.readouterr()
    assert "Skipping (not a file)" in captured.err
    assert f"Skipping {bad}" in captured.err
    assert "Equator Walk" in captured.out


def test_main_skips_malformed_track(tmp_path, fixed_config, capsys):
    p = tmp_path / "broken.gpx"
    p.write_text(
        '<gpx xmlns="http://www.topografix.com/GPX/1/1">'
        '<trk><name>Broken</name><trkseg><trkpt lon="1"/></trkseg></trk>'
        '<trk><name>Fine</name><trkseg><trkpt lat="1" lon="1"/></trkseg></trk>'
        '</gpx>',
        encoding="utf-8",
    )
    assert ga.main([str(p)]) == 1
    captured = capsys.readouterr()
    assert "Skipping track 0 (Broken)" in captured.err
    assert "[track 1] Fine" in captured.out


def test_main_plots(sample_gpx_path, fixed_config, tmp_path):
    plot_dir = tmp_path / "plots"
    assert ga.main([str(sample_gpx_path), "--plot-dir", str(plot_dir)]) == 0
    assert sorted(p.name for p in plot_dir.iterdir()) == [
        "sample_0_equator_walk_seg0.png",
        "sample_1_track_seg0.png",
    ]


def test_main_plot_uses_configured_plot_root(sample_gpx_path, fixed_config):
    assert ga.main([str(sample_gpx_path), "--plot"]) == 0
    assert sorted(p.name for p in fixed_config.paths.plot_root.iterdir()) == [
        "sample_0_equator_walk_seg0.png",
        "sample_1_track_seg0.png",
    ]


def test_main_without_plot_flags_writes_nothing(sample_gpx_path, fixed_config):
    assert ga.main([str(sample_gpx_path)]) == 0
    assert not fixed_config.paths.plot_root.exists()


def test_main_no_files_in_work_root(fixed_config):
    assert ga.main([]) == 2


def test_main_selects_with_fzf(sample_gpx_path, fixed_config, monkeypatch, capsys):
    work = fixed_config.paths.work_root
    work.mkdir(parents=True)
    (work / "a.gpx").write_text("<gpx/>", encoding="utf-8")

    seen = {}

    def fake_select(paths, *, header, multi=True):
        seen["paths"] = paths
        return [sample_gpx_path]

    monkeypatch.setattr(ga, "fzf_select_paths", fake_select)
    assert ga.main([]) == 0
    assert seen["paths"] == [work / "a.gpx"]
    assert "Equator Walk" in capsys.readouterr().out


def test_parse_coordinate():
    c = ga.parse_coordinate("32.5, -116.25, 1200")
    assert (c.latitude, c.longitude, c.elevation) == (32.5, -116.25, 1200.0)
    assert ga.parse_coordinate("1,2").elevation == 0.0
