"""
회로 데이터 직렬화 헬퍼
=======================

스키마, 레이아웃, 위트니스 테이블을 JSON으로 저장 가능한 dict로 변환한다.
증명 백엔드로 넘기거나, 두 패스의 결과가 바이트 단위로 같은지
비교할 때 사용한다.

  json.dumps(serialize_table(table), sort_keys=True)

출력은 결정적이다: 열은 인덱스 순서, 복사 제약은 정렬된 순서로 나온다.
"""

from plonkish.circuit.field import FR


# ─── FR ───

def serialize_fr(val):
    """FR → str(int)"""
    return str(int(val))


def deserialize_fr(s):
    """str(int) → FR"""
    return FR(int(s))


def serialize_column_values(values):
    """FR 목록 → list of str"""
    return [serialize_fr(v) for v in values]


# ─── Column / Cell ───

def serialize_column(column):
    """Column → {"index", "kind", "name"}"""
    return {
        "index": column.index,
        "kind": column.kind.value,
        "name": column.name,
    }


def serialize_cell(cell):
    """절대 Cell → [열 인덱스, 행]"""
    if not cell.is_absolute:
        raise ValueError(f"배치되지 않은 셀은 직렬화할 수 없습니다: {cell!r}")
    return [cell.column.index, cell.row]


# ─── CircuitSchema ───

def serialize_gate(gate):
    """Gate → {"name", "selector", "constraints": [[이름, 식], ...]}"""
    return {
        "name": gate.name,
        "selector": gate.selector.index,
        "constraints": [[label, str(expr)] for label, expr in gate.constraints],
        "rotation_span": list(gate.rotation_span()),
    }


def serialize_schema(schema):
    """CircuitSchema → dict"""
    return {
        "columns": [serialize_column(c) for c in schema.columns],
        "gates": [serialize_gate(g) for g in schema.gates],
        "equality": sorted(c.index for c in schema.equality_columns),
        "degree": schema.degree,
    }


# ─── CircuitLayout ───

def serialize_copies(copies):
    """절대 셀 쌍 목록 → 정렬된 [[열, 행], [열, 행]] 목록"""
    pairs = []
    for left, right in copies:
        pair = sorted([serialize_cell(left), serialize_cell(right)])
        pairs.append(pair)
    pairs.sort()
    return pairs


def serialize_layout(layout):
    """CircuitLayout → dict"""
    return {
        "k": layout.k,
        "n": layout.n,
        "schema": serialize_schema(layout.schema),
        "fixed": {
            str(c.index): serialize_column_values(layout.fixed[c])
            for c in layout.schema.fixed_columns
        },
        "selectors": {
            str(s.index): [row for row, on in enumerate(layout.selectors[s]) if on]
            for s in layout.schema.selectors
        },
        "copies": serialize_copies(layout.copies),
        "regions": [
            {"index": r.index, "name": r.name, "start": r.start, "height": r.height}
            for r in layout.regions
        ],
    }


# ─── WitnessTable ───

def serialize_table(table):
    """WitnessTable → dict (레이아웃 + advice + instance)"""
    data = serialize_layout(table.layout)
    data["advice"] = {
        str(c.index): serialize_column_values(table.advice[c])
        for c in table.schema.advice_columns
    }
    data["instance"] = {
        str(c.index): serialize_column_values(table.instance[c])
        for c in table.schema.instance_columns
    }
    return data
