"""
열(Column), 회전(Rotation), 셀(Cell)
====================================

**열 종류 (ColumnKind)**:
  | 종류             | 내용                           | 결정 주체      |
  |------------------|--------------------------------|----------------|
  | FIXED            | 회로가 정하는 상수             | 회로 (키 생성) |
  | ADVICE           | 비공개 위트니스                | Prover         |
  | INSTANCE         | 공개 입력/출력                 | 외부 (공개)    |
  | SELECTOR         | 게이트를 켜고 끄는 0/1 값      | 회로 (키 생성) |
  | COMPLEX_SELECTOR | 제약식 안에서도 쓸 수 있는 셀렉터 | 회로 (키 생성) |

**회전 (Rotation)**:
  게이트는 절대 행이 아니라 "현재 행" 기준의 상대 오프셋으로 셀을 쿼리한다.
    Rotation.cur()  →  0
    Rotation.next() → +1
    Rotation.prev() → -1
  절대 행으로의 변환은 영역 배치가 끝난 뒤에야 일어난다.

**셀 (Cell)**:
  (열, 행) 쌍. 영역 안에서 만들어진 셀은 (영역 번호, 영역 내 오프셋)으로
  기록되며, 영역의 시작 행이 정해진 뒤 절대 행으로 변환된다.
  공개 입력 셀처럼 영역에 속하지 않는 셀은 처음부터 절대 행을 갖는다.
"""

import enum

from plonkish.circuit.expression import Query


class ColumnKind(enum.Enum):
    """열의 종류."""
    FIXED = "fixed"
    ADVICE = "advice"
    INSTANCE = "instance"
    SELECTOR = "selector"
    COMPLEX_SELECTOR = "complex_selector"

    @property
    def is_selector(self):
        return self in (ColumnKind.SELECTOR, ColumnKind.COMPLEX_SELECTOR)


class Rotation:
    """현재 행 기준의 부호 있는 행 오프셋."""

    def __init__(self, offset=0):
        if isinstance(offset, bool) or not isinstance(offset, int):
            raise TypeError(f"회전은 정수여야 합니다: {offset!r}")
        self.offset = offset

    @classmethod
    def cur(cls):
        return cls(0)

    @classmethod
    def next(cls):
        return cls(1)

    @classmethod
    def prev(cls):
        return cls(-1)

    def __eq__(self, other):
        if isinstance(other, Rotation):
            return self.offset == other.offset
        return NotImplemented

    def __hash__(self):
        return hash(("rotation", self.offset))

    def __repr__(self):
        return f"Rotation({self.offset})"


class Column:
    """테이블의 한 열.

    ConstraintSystem만 열을 만든다. 열은 생성 후 변경되지 않으며
    (인덱스, 종류)로 식별된다.

    속성:
        index: 스키마 전체에서의 열 번호 (생성 순서)
        kind: ColumnKind
        name: 진단용 이름
    """

    def __init__(self, index, kind, name=None):
        self.index = index
        self.kind = kind
        self.name = name or f"{kind.value}_{index}"

    # ── 쿼리 생성 ──

    def query(self, rotation=None):
        """이 열을 주어진 회전으로 쿼리하는 표현식을 만든다.

        Args:
            rotation: Rotation 또는 정수 (기본값: 현재 행)

        Returns:
            Query
        """
        if rotation is None:
            rotation = Rotation.cur()
        elif not isinstance(rotation, Rotation):
            rotation = Rotation(rotation)
        return Query(self, rotation)

    def cur(self):
        return self.query(Rotation.cur())

    def next(self):
        return self.query(Rotation.next())

    def prev(self):
        return self.query(Rotation.prev())

    def rot(self, offset):
        return self.query(Rotation(offset))

    def enable(self, region, offset):
        """셀렉터 열을 영역의 offset 행에서 켠다 (region.enable_selector 위임)."""
        return region.enable_selector(self, offset)

    # ── 식별 ──

    def _key(self):
        return (self.index, self.kind)

    def __eq__(self, other):
        if isinstance(other, Column):
            return self._key() == other._key()
        return NotImplemented

    def __lt__(self, other):
        if not isinstance(other, Column):
            return NotImplemented
        return self.index < other.index

    def __hash__(self):
        return hash(("column",) + self._key())

    def __repr__(self):
        return f"Column({self.name})"


class Cell:
    """열과 행으로 지정되는 셀.

    region_index가 None이면 row는 절대 행이고,
    그렇지 않으면 해당 영역의 상대 오프셋이다.
    """

    def __init__(self, column, row, region_index=None):
        self.column = column
        self.row = row
        self.region_index = region_index

    @property
    def is_absolute(self):
        return self.region_index is None

    def resolve(self, region_starts):
        """영역 시작 행 목록으로 절대 셀을 만든다."""
        if self.is_absolute:
            return self
        return Cell(self.column, region_starts[self.region_index] + self.row)

    def _key(self):
        return (self.column.index, self.row, self.region_index)

    def __eq__(self, other):
        if isinstance(other, Cell):
            return self.column == other.column and self._key() == other._key()
        return NotImplemented

    def __lt__(self, other):
        if not isinstance(other, Cell):
            return NotImplemented
        return (self.column.index, self.row) < (other.column.index, other.row)

    def __hash__(self):
        return hash(("cell",) + self._key())

    def __repr__(self):
        if self.is_absolute:
            return f"Cell({self.column.name}, row={self.row})"
        return f"Cell({self.column.name}, region={self.region_index}, offset={self.row})"
