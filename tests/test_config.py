"""Tests for configuration objects and config file loading."""

import dataclasses
import json
import logging

import pytest

from incident_graph.config import UNBOUNDED, GraphConfig, MultiDatasetConfig, load_config, resolve_bound


class TestMultiDatasetConfig:
    def test_defaults(self):
        config = MultiDatasetConfig()
        assert config.max_incidents_per_dataset == 15
        assert config.max_depth == 2
        assert config.incident_markers == ("Incident", "Death")
        assert config.potential_sample_size == 50
        assert (config.min_radius, config.max_radius) == (10, 40)

    def test_unbounded_sentinel(self):
        config = MultiDatasetConfig(max_incidents_per_dataset=UNBOUNDED, max_depth=None)
        assert config.incident_limit is None
        assert config.depth_limit is None

    def test_with_bounds_returns_new_config(self):
        config = MultiDatasetConfig()
        bounded = config.with_bounds(5, 0)
        assert (bounded.max_incidents_per_dataset, bounded.max_depth) == (5, 0)
        assert (config.max_incidents_per_dataset, config.max_depth) == (15, 2)

    def test_frozen(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            MultiDatasetConfig().max_depth = 5

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"max_depth": -2},
            {"max_incidents_per_dataset": 1.5},
            {"max_depth": True},
            {"min_radius": 50, "max_radius": 10},
            {"min_radius": -1},
            {"potential_sample_size": -1},
            {"label_max_length": 0},
        ],
    )
    def test_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            MultiDatasetConfig(**kwargs)


class TestGraphConfig:
    def test_defaults(self):
        config = GraphConfig()
        assert (config.min_radius, config.max_radius) == (15, 120)
        assert "aiid:Incident" in config.semantic_types

    def test_semantic_types_become_tuple(self):
        assert GraphConfig(semantic_types=["core:Person"]).semantic_types == ("core:Person",)

    def test_invalid_radius(self):
        with pytest.raises(ValueError):
            GraphConfig(min_radius=200)


class TestResolveBound:
    def test_values(self):
        assert resolve_bound(UNBOUNDED) is None
        assert resolve_bound(None) is None
        assert resolve_bound(0) == 0
        assert resolve_bound(15) == 15


class TestLoadConfig:
    """Tests for load_config()."""

    def test_overrides(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(
            json.dumps(
                {
                    "graph": {"min_radius": 5, "max_radius": 50, "semantic_types": ["aiid:Incident"]},
                    "multi_dataset": {"max_depth": -1, "incident_markers": ["Incident"]},
                }
            )
        )
        graph_config, multi_config = load_config(str(path))
        assert graph_config.semantic_types == ("aiid:Incident",)
        assert graph_config.max_radius == 50
        assert multi_config.depth_limit is None
        assert multi_config.incident_markers == ("Incident",)
        assert multi_config.max_incidents_per_dataset == 15

    def test_missing_sections_use_defaults(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{}")
        graph_config, multi_config = load_config(str(path))
        assert graph_config == GraphConfig()
        assert multi_config == MultiDatasetConfig()

    def test_unknown_keys_warn(self, tmp_path, caplog):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"multi_dataset": {"bogus": 1}}))
        with caplog.at_level(logging.WARNING):
            load_config(str(path))
        assert "bogus" in caplog.text

    def test_not_an_object(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("[1, 2]")
        with pytest.raises(ValueError):
            load_config(str(path))

    def test_section_not_an_object(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"graph": 3}))
        with pytest.raises(ValueError):
            load_config(str(path))

    def test_invalid_value(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"multi_dataset": {"min_radius": 50, "max_radius": 10}}))
        with pytest.raises(ValueError):
            load_config(str(path))

    def test_malformed_json_propagates(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{not json")
        with pytest.raises(json.JSONDecodeError):
            load_config(str(path))
