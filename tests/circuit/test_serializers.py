"""
serializers.py 테스트: 스키마/레이아웃/테이블의 JSON 변환
"""
import json

import pytest
from plonkish.circuit.field import FR, CURVE_ORDER
from plonkish.circuit.column import Cell
from plonkish.circuit.serializers import (
    deserialize_fr,
    serialize_cell,
    serialize_copies,
    serialize_fr,
    serialize_layout,
    serialize_schema,
    serialize_table,
)


class TestFR:
    def test_serialize_fr(self):
        assert serialize_fr(FR(42)) == "42"
        assert serialize_fr(FR(-1)) == str(CURVE_ORDER - 1)

    def test_deserialize_fr(self):
        assert deserialize_fr("42") == FR(42)
        assert deserialize_fr(serialize_fr(FR(-5))) == FR(-5)


class TestCell:
    def test_absolute_cell(self, column_data):
        (advice,) = column_data["table"].schema.advice_columns
        assert serialize_cell(Cell(advice, 9)) == [advice.index, 9]

    def test_relative_cell_rejected(self, column_data):
        (advice,) = column_data["table"].schema.advice_columns
        with pytest.raises(ValueError):
            serialize_cell(Cell(advice, 0, region_index=0))

    def test_copies_sorted(self, column_data):
        (advice,) = column_data["table"].schema.advice_columns
        (instance,) = column_data["table"].schema.instance_columns
        copies = [
            (Cell(instance, 2), Cell(advice, 9)),
            (Cell(advice, 0), Cell(instance, 0)),
        ]
        assert serialize_copies(copies) == [
            [[advice.index, 0], [instance.index, 0]],
            [[advice.index, 9], [instance.index, 2]],
        ]


class TestSchema:
    def test_column_circuit_schema(self, column_data):
        data = serialize_schema(column_data["table"].schema)
        assert [c["kind"] for c in data["columns"]] == ["advice", "instance", "selector"]
        assert [c["name"] for c in data["columns"]] == ["a", "public", "s_add"]
        assert data["equality"] == [0, 1]
        assert data["degree"] == 2
        (gate,) = data["gates"]
        assert gate["name"] == "add"
        assert gate["selector"] == 2
        assert gate["constraints"] == [["add[0]", "(a + a[+1] - a[+2])"]]
        assert gate["rotation_span"] == [0, 2]


class TestLayout:
    def test_layout(self, column_data):
        data = serialize_layout(column_data["layout"])
        assert data["k"] == 4
        assert data["n"] == 16
        assert data["fixed"] == {}
        assert data["selectors"] == {"2": list(range(8))}
        assert data["copies"] == [
            [[0, 0], [1, 0]],
            [[0, 1], [1, 1]],
            [[0, 9], [1, 2]],
        ]
        assert data["regions"] == [
            {"index": 0, "name": "entire table/entire fibonacci table", "start": 0, "height": 10},
        ]

    def test_keygen_and_witness_layouts_agree(self, column_data):
        assert serialize_layout(column_data["layout"]) == serialize_layout(column_data["table"].layout)


class TestTable:
    def test_table(self, column_data):
        data = serialize_table(column_data["table"])
        assert data["advice"]["0"][:10] == ["1", "1", "2", "3", "5", "8", "13", "21", "34", "55"]
        assert data["advice"]["0"][10:] == ["0"] * 6
        assert data["instance"]["1"][:3] == ["1", "1", "55"]

    def test_json_safe(self, rows_data):
        text = json.dumps(serialize_table(rows_data["table"]), sort_keys=True)
        assert json.loads(text)["n"] == 16
