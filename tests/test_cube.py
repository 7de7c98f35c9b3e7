"""
Unit tests for the cube module.
"""

import random
import sys
import os

import numpy as np
import pandas as pd
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from olapcube.cube.schema import (
    AxisMapping, Fact, RawRecord, InvalidAxisMappingError, UnknownDimensionError,
    UnknownRowError, QUARTER_DOMAIN
)
from olapcube.cube.dimensions import unique_values, axis_domain, ordinal_map
from olapcube.cube.expansion import expand, expand_rows
from olapcube.cube.filters import slice_facts, dice_facts, active_filters
from olapcube.cube.aggregation import roll_up, drill_down
from olapcube.cube.grid import build_grid, block_color
from olapcube.cube import table


@pytest.fixture
def mapping():
    return AxisMapping(x="continent", y="region", z="quarter")


@pytest.fixture
def sales_rows():
    """Small sales table with one incomplete row."""
    return [
        RawRecord(1, "Asia", "East", "A", 10, 20, 30, 40),
        RawRecord(2, "Asia", "West", "B", 5, 5, None, 5),
        RawRecord(3, "Europe", "North", "A", 1, 2, 3, 4),
        RawRecord(4, "Europe", "", "C", 7, 7, 7, 7),
        RawRecord(5, "America", "South", "", 2.5, 2.5, 2.5, 2.5),
    ]


@pytest.fixture
def facts(sales_rows, mapping):
    return expand(sales_rows, mapping)


class TestAxisMapping:
    def test_valid_mapping(self):
        assert AxisMapping("continent", "region", "quarter").is_valid

    def test_duplicate_axes_rejected(self):
        m = AxisMapping(x="continent", y="region", z="region")
        assert not m.is_valid
        with pytest.raises(InvalidAxisMappingError):
            m.validate()

    def test_unknown_dimension_rejected(self):
        with pytest.raises(InvalidAxisMappingError):
            AxisMapping(x="continent", y="region", z="month").validate()

    def test_from_dict(self):
        m = AxisMapping.from_dict({"x": "product", "y": "continent", "z": "quarter"})
        assert m.axes == ("product", "continent", "quarter")
        assert m.to_dict() == {"x": "product", "y": "continent", "z": "quarter"}

    def test_from_dict_missing_axis(self):
        with pytest.raises(InvalidAxisMappingError, match="z"):
            AxisMapping.from_dict({"x": "continent", "y": "product"})

    def test_validate_against_restricted_dimensions(self):
        m = AxisMapping("product", "continent", "quarter")
        assert m.validate() is m
        with pytest.raises(InvalidAxisMappingError, match="product"):
            m.validate(("continent", "region", "quarter"))


class TestFactExpansion:
    def test_one_fact_per_defined_quarter(self, facts):
        by_row = {}
        for f in facts:
            by_row.setdefault(f.id.split("-")[0], []).append(f)
        assert len(by_row["1"]) == 4
        assert len(by_row["2"]) == 3
        assert [f.quarter for f in by_row["2"]] == ["Q1", "Q2", "Q4"]

    def test_row_missing_mapped_dimension_is_skipped(self, sales_rows, mapping):
        result = expand_rows(sales_rows, mapping)
        assert not any(f.id.startswith("4-") for f in result.facts)
        assert len(result.skipped) == 1
        assert result.skipped[0].row.id == 4
        assert result.skipped[0].missing == ["region"]

    def test_blank_unmapped_dimension_is_kept(self, facts):
        # Row 5 has a blank product, which is not on X or Y.
        assert len([f for f in facts if f.id.startswith("5-")]) == 4

    def test_skip_is_logged(self, sales_rows, mapping, caplog):
        with caplog.at_level("WARNING", logger="olapcube.cube.expansion"):
            expand(sales_rows, mapping)
        assert "row 4 missing value for region" in caplog.text

    def test_quarter_on_x_axis_never_skips(self, sales_rows):
        m = AxisMapping(x="quarter", y="continent", z="product")
        result = expand_rows(sales_rows, m)
        assert result.skipped == []

    def test_fact_carries_all_measures(self, facts):
        f = facts[1]
        assert f.id == "1-Q2"
        assert f.quarter == "Q2"
        assert f.value == 20
        assert (f.q1, f.q2, f.q3, f.q4) == (10, 20, 30, 40)
        assert f.total is None

    def test_order_follows_rows_then_quarters(self, facts):
        ids = [f.id for f in facts[:5]]
        assert ids == ["1-Q1", "1-Q2", "1-Q3", "1-Q4", "2-Q1"]

    def test_deterministic(self, sales_rows, mapping):
        assert expand(sales_rows, mapping) == expand(sales_rows, mapping)

    def test_accepts_mappings_and_nan(self, mapping):
        rows = [{"id": 1, "continent": "Asia", "region": "East", "product": "A",
                 "Q1": 1, "Q2": float("nan"), "Q3": None, "Q4": 4}]
        assert [f.quarter for f in expand(rows, mapping)] == ["Q1", "Q4"]


class TestDimensionUtilities:
    def test_unique_values_sorted(self, facts):
        assert unique_values(facts, "continent") == ["America", "Asia", "Europe"]

    def test_numbers_sort_numerically(self):
        fs = [Fact(str(i), p, "r", "x", "Q1", 1) for i, p in enumerate([10, 9, 10, "b"])]
        assert unique_values(fs, "continent") == [9, 10, "b"]

    def test_quarter_domain_is_fixed(self, facts):
        assert axis_domain(facts, "quarter") == list(QUARTER_DOMAIN)
        assert axis_domain([], "quarter") == ["Q1", "Q2", "Q3", "Q4", "Total"]

    def test_ordinal_map(self):
        assert ordinal_map(["America", "Asia"]) == {"America": 0, "Asia": 1}

    def test_unknown_dimension(self, facts):
        with pytest.raises(UnknownDimensionError):
            unique_values(facts, "month")


class TestFilters:
    def test_slice_identity(self, facts):
        assert slice_facts(facts, "continent", "") == facts
        assert slice_facts(facts, "", "asia") == facts
        assert dice_facts(facts, {}) == facts
        assert dice_facts(facts, {"continent": "", "region": None}) == facts

    def test_slice_is_case_insensitive_substring(self, facts):
        result = slice_facts(facts, "continent", "ASI")
        assert result
        assert all(f.continent == "Asia" for f in result)

    def test_slice_no_match_is_empty(self, facts):
        assert slice_facts(facts, "continent", "antarctica") == []

    def test_dice_single_filter_equals_slice(self, facts):
        assert dice_facts(facts, {"region": "st"}) == slice_facts(facts, "region", "st")

    def test_dice_is_intersection_of_slices(self, facts):
        by_continent = slice_facts(facts, "continent", "asia")
        by_product = slice_facts(facts, "product", "a")
        expected = [f for f in by_continent if f in by_product]
        assert dice_facts(facts, {"continent": "asia", "product": "a"}) == expected

    def test_active_filters_drops_empty(self):
        assert active_filters({"continent": "Asia", "region": ""}) == {"continent": "Asia"}
        assert active_filters(None) == {}


class TestAggregation:
    def test_total_is_sum_of_quarters(self, facts):
        totals = {f.entity_key: f.total for f in roll_up(facts)}
        assert totals[("Asia", "East", "A")] == 100
        assert totals[("Asia", "West", "B")] == 15
        assert totals[("America", "South", "")] == 10

    def test_rolled_up_fact_shape(self, facts):
        rolled = roll_up(facts)[0]
        assert rolled.id == "Asia-East-A"
        assert rolled.quarter == "Total"
        assert rolled.value is None
        assert (rolled.q1, rolled.q2, rolled.q3, rolled.q4) == (10, 20, 30, 40)
        assert rolled.to_dict()["Total"] == 100

    def test_one_fact_per_entity(self, facts):
        rolled = roll_up(facts)
        assert len(rolled) == len({f.entity_key for f in facts})

    def test_order_independent(self):
        fs = [Fact(f"{i}", "Asia", "East", "A", "Q1", v)
              for i, v in enumerate([0.1, 0.2, 0.3, 1e16, 1.0, -1e16])]
        shuffled = list(fs)
        random.Random(7).shuffle(shuffled)
        assert roll_up(fs)[0].total == roll_up(shuffled)[0].total

    def test_missing_and_blank_values_share_a_group(self):
        fs = [
            Fact("1-Q1", "Asia", "East", None, "Q1", 1.0),
            Fact("2-Q1", "Asia", "East", "", "Q1", 2.0),
        ]
        rolled = roll_up(fs)
        assert len(rolled) == 1
        assert rolled[0].id == "Asia-East-"
        assert rolled[0].total == 3.0

    def test_rolled_up_ids_are_unique(self, facts):
        ids = [f.id for f in roll_up(facts)]
        assert len(ids) == len(set(ids))

    def test_roll_up_of_totals_is_stable(self, facts):
        once = roll_up(facts)
        assert [f.total for f in roll_up(once)] == [f.total for f in once]

    def test_drill_down_restores_snapshot(self, facts):
        assert drill_down(facts) == facts
        assert drill_down(tuple(facts)) == facts


class TestGrid:
    def test_cells_use_axis_ordinals(self, facts, mapping):
        grid = build_grid(facts, mapping)
        assert grid.domains["x"] == ["America", "Asia", "Europe"]
        assert grid.shape == (3, 4, 5)
        cell = next(c for c in grid.cells if c.fact_id == "1-Q2")
        assert cell.position == (1, 0, 1)
        assert cell.value == 20

    def test_rolled_up_cells_sit_on_total(self, facts, mapping):
        grid = build_grid(roll_up(facts), mapping)
        assert {c.z for c in grid.cells} == {4}

    def test_block_color_is_deterministic(self, facts):
        assert block_color(facts[0]) == block_color(facts[0])
        assert block_color(facts[0]).startswith("#")
        assert len(block_color(facts[0])) == 7

    def test_to_frame(self, facts, mapping):
        df = build_grid(facts, mapping).to_frame()
        assert len(df) == len(facts)
        assert set(df["z_label"]) <= set(QUARTER_DOMAIN)


class TestTable:
    def test_parse_measure(self):
        assert table.parse_measure("12.5k") == 12.5
        assert table.parse_measure("abc") == 0.0
        assert table.parse_measure("") == 0.0
        assert table.parse_measure(None) == 0.0
        assert table.parse_measure(np.nan) == 0.0
        assert table.parse_measure(3) == 3.0

    def test_add_row_allocates_next_id(self, sales_rows):
        rows = table.add_row(sales_rows, continent="Africa", region="West", Q1="3")
        assert len(rows) == len(sales_rows) + 1
        assert rows[-1].id == 6
        assert (rows[-1].q1, rows[-1].q2) == (3.0, 0.0)
        assert table.add_row([])[0].id == 1

    def test_update_cell(self, sales_rows):
        rows = table.update_cell(sales_rows, 1, "Q1", "99")
        assert rows[0].q1 == 99.0
        assert sales_rows[0].q1 == 10
        rows = table.update_cell(rows, 1, "region", "South")
        assert rows[0].region == "South"

    def test_update_unknown_row(self, sales_rows):
        with pytest.raises(UnknownRowError):
            table.update_cell(sales_rows, 42, "Q1", 1)

    def test_delete_row(self, sales_rows):
        rows = table.delete_row(sales_rows, 2)
        assert [r.id for r in rows] == [1, 3, 4, 5]

    def test_records_from_frame(self, mapping):
        df = pd.DataFrame({
            "continent": ["Asia", "Europe"],
            "region": ["East", None],
            "product": ["A", "B"],
            "Q1": [1.0, 2.0], "Q2": [1.0, 2.0], "Q3": [np.nan, 2.0], "Q4": [1.0, 2.0],
        })
        rows = table.records_from_frame(df)
        assert [r.id for r in rows] == [1, 2]
        assert rows[0].q3 is None
        assert rows[1].region is None
        assert len(expand(rows, mapping)) == 3

    def test_frame_round_trip_columns(self, sales_rows):
        df = table.records_to_frame(sales_rows)
        assert list(df.columns) == table.TABLE_COLUMNS
        assert table.records_from_frame(df)[0] == sales_rows[0]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
