"""
위트니스 테이블 (Witness Table)
===============================

할당 패스의 최종 산출물. 외부 증명 백엔드에 넘겨지는 불변 데이터이다.

**CircuitLayout** (키 생성 단계 산출물):
  위트니스와 무관한 부분만 담는다.
    - 고정 열 값, 셀렉터 활성 비트맵
    - 복사 제약 (절대 셀 쌍)
    - 영역 배치 (이름, 시작 행, 높이)

**WitnessTable** (위트니스 단계 산출물):
  CircuitLayout + advice 열 값 + instance 열 값.

  행 →   | advice_0 | advice_1 | fixed_0 | instance_0 | s_0 |
  -------+----------+----------+---------+------------+-----+
    0    |    1     |    1     |    0    |     1      |  1  |
    1    |    1     |    2     |    0    |     1      |  1  |
   ...   |   ...    |   ...    |   ...   |    ...     | ... |

할당되지 않은 셀은 0이다.
"""

from plonkish.circuit.column import ColumnKind
from plonkish.circuit.field import FR


class RegionPlacement:
    """배치된 영역 하나의 기록."""

    def __init__(self, index, name, start, height):
        self.index = index
        self.name = name
        self.start = start
        self.height = height

    @property
    def end(self):
        return self.start + self.height

    def _key(self):
        return (self.index, self.name, self.start, self.height)

    def __eq__(self, other):
        if isinstance(other, RegionPlacement):
            return self._key() == other._key()
        return NotImplemented

    def __hash__(self):
        return hash(self._key())

    def __repr__(self):
        return f"RegionPlacement({self.index}, {self.name!r}, rows {self.start}..{self.end - 1})"


class CircuitLayout:
    """키 생성 단계의 레이아웃. 생성 후 변경되지 않는다.

    속성:
        k, n: 크기 파라미터와 테이블 높이 (n = 2^k)
        schema: CircuitSchema
        fixed: {고정 열: FR 튜플 (길이 n)}
        selectors: {셀렉터 열: bool 튜플 (길이 n)}
        copies: 절대 (Cell, Cell) 쌍의 튜플
        regions: RegionPlacement 튜플 (배치 순서)
    """

    def __init__(self, k, schema, fixed, selectors, copies, regions):
        self.k = k
        self.n = 1 << k
        self.schema = schema
        self.fixed = dict(fixed)
        self.selectors = dict(selectors)
        self.copies = tuple(copies)
        self.regions = tuple(regions)

    @property
    def used_rows(self):
        """배치된 영역이 차지하는 행 수 (마지막 영역의 끝)."""
        return max((r.end for r in self.regions), default=0)

    def is_enabled(self, selector, row):
        return self.selectors[selector][row]

    def enabled_rows(self, selector):
        return [row for row, on in enumerate(self.selectors[selector]) if on]

    def same_shape(self, other):
        """두 레이아웃의 배치, 고정 열, 셀렉터, 복사 제약이 같은지 비교한다.

        Returns:
            str 또는 None: 처음 발견된 차이의 설명, 같으면 None
        """
        if self.k != other.k:
            return f"k {self.k} != {other.k}"
        if self.schema is not other.schema:
            return "스키마"
        if self.regions != other.regions:
            return "영역 배치"
        for column in self.schema.fixed_columns:
            if self.fixed[column] != other.fixed[column]:
                return f"고정 열 {column.name}"
        for selector in self.schema.selectors:
            if self.selectors[selector] != other.selectors[selector]:
                return f"셀렉터 {selector.name}"
        if self.copies != other.copies:
            return "복사 제약"
        return None


class WitnessTable:
    """위트니스 단계의 완성된 테이블. 생성 후 변경되지 않는다."""

    def __init__(self, layout, advice, instance):
        self.layout = layout
        self.advice = dict(advice)
        self.instance = dict(instance)

    # ── 레이아웃 위임 ──

    @property
    def k(self):
        return self.layout.k

    @property
    def n(self):
        return self.layout.n

    @property
    def schema(self):
        return self.layout.schema

    @property
    def fixed(self):
        return self.layout.fixed

    @property
    def selectors(self):
        return self.layout.selectors

    @property
    def copies(self):
        return self.layout.copies

    @property
    def regions(self):
        return self.layout.regions

    def is_enabled(self, selector, row):
        return self.layout.is_enabled(selector, row)

    # ── 값 조회 ──

    def column_values(self, column):
        """열 전체의 값을 반환한다. 셀렉터 열은 FR(0)/FR(1)이 아닌 bool이다."""
        kind = column.kind
        if kind == ColumnKind.ADVICE:
            return self.advice[column]
        if kind == ColumnKind.FIXED:
            return self.fixed[column]
        if kind == ColumnKind.INSTANCE:
            return self.instance[column]
        return self.selectors[column]

    def value(self, column, row):
        """(열, 행) 셀의 FR 값. 셀렉터는 0 또는 1."""
        value = self.column_values(column)[row]
        if column.kind.is_selector:
            return FR(1) if value else FR(0)
        return value

    def cell_value(self, cell):
        """절대 Cell의 값."""
        return self.value(cell.column, cell.row)

    def rows(self):
        """행 단위로 [열 순서의 값 목록]을 돌려주는 제너레이터."""
        columns = self.schema.columns
        for row in range(self.n):
            yield [self.value(column, row) for column in columns]
