"""
레이아웃 (Layouter / Region)
============================

할당 로직은 셀을 절대 행에 직접 쓰지 않는다. 대신 관련된 셀과 셀렉터를
"영역(region)" 단위로 묶어 상대 오프셋으로 할당하고, 영역이 닫힐 때
플래너가 영역 전체의 시작 행을 정한다.

  with layouter.region("first row") as region:
      region.enable_selector(s, 0)
      a = region.assign_advice("a", col_a, 0, Value.known(1))
      ...
  # ← 이 시점에 영역이 배치된다 (상대 오프셋 → 절대 행)

**단계 (Phase)**:
  - KEYGEN:  advice/instance 값은 보류된다. 고정 열 값, 셀렉터, 배치,
             복사 제약만 기록된다.
  - WITNESS: 모든 값이 기록된다. advice 값이 없으면 WitnessMissingError.
  두 단계는 같은 할당 로직을 같은 순서로 실행하므로 배치가 같다.

**영역 검증 (영역이 닫힐 때)**:
  1. 높이 = max(지정 높이, 사용한 최대 오프셋 + 1)
  2. 높이 > 2^k                     → RegionOverflowError
  3. 켜진 게이트의 쿼리가 영역 밖    → RegionBoundsError
  4. 시작 행 + 높이 > 2^k            → TableTooSmallError
  5. 다른 영역과 같은 셀             → CellCollisionError
"""

import enum
import logging
from contextlib import contextmanager

from plonkish.circuit.column import Cell, ColumnKind
from plonkish.circuit.errors import (
    CellCollisionError,
    InstanceError,
    RegionBoundsError,
    RegionOverflowError,
    SynthesisError,
    TableTooSmallError,
    UnknownColumnError,
)
from plonkish.circuit.field import FR, to_fr
from plonkish.circuit.permutation import EqualityTracker
from plonkish.circuit.planner import LinearPlanner, RegionShape
from plonkish.circuit.utils import table_height
from plonkish.circuit.value import Value
from plonkish.circuit.witness import CircuitLayout, RegionPlacement, WitnessTable

logger = logging.getLogger(__name__)


class Phase(enum.Enum):
    """할당 패스의 실행 모드."""
    KEYGEN = "keygen"
    WITNESS = "witness"


class AssignedCell:
    """영역에 할당된 셀과 그 값.

    속성:
        cell: Cell (영역 상대)
        value: Value (키 생성 단계의 advice는 항상 unknown)
    """

    def __init__(self, cell, value):
        self.cell = cell
        self.value = value

    def copy_advice(self, name, region, column, offset):
        """이 셀의 값을 다른 영역의 advice 셀로 복사하고 복사 제약을 건다.

        Returns:
            AssignedCell: 새로 할당된 셀
        """
        copied = region.assign_advice(name, column, offset, self.value)
        region.constrain_equal(copied.cell, self.cell)
        return copied

    def __repr__(self):
        return f"AssignedCell({self.cell!r}, {self.value!r})"


def _as_cell(cell):
    return cell.cell if isinstance(cell, AssignedCell) else cell


class Region:
    """하나의 영역에 대한 할당 핸들.

    Layouter.region() 블록 안에서만 유효하다. 블록을 벗어나면 닫히고
    이후의 모든 호출은 SynthesisError를 낸다.
    """

    def __init__(self, layouter, index, name, height=None):
        self.layouter = layouter
        self.index = index
        self.name = name
        self.height = height
        self.cells = {}
        self.selectors = set()
        self.copies = []
        self.closed = False

    # ── 할당 ──

    def assign_advice(self, name, column, offset, value):
        """advice 셀에 값을 할당한다.

        Args:
            name: 진단용 셀 이름
            column: advice 열
            offset: 영역 내 행 오프셋
            value: Value, int, FR 또는 None(unknown)

        Returns:
            AssignedCell

        Raises:
            WitnessMissingError: 위트니스 단계에서 값이 unknown일 때
            CellCollisionError: 같은 셀에 두 번 할당할 때
        """
        self._check_column(column, ColumnKind.ADVICE)
        value = Value.wrap(value)
        if self.layouter.phase == Phase.WITNESS:
            stored = value.assign(name)
            value = Value.known(stored)
        else:
            stored = None
            value = Value.unknown()
        self._record(column, offset, stored)
        return AssignedCell(Cell(column, offset, self.index), value)

    def assign_fixed(self, name, column, offset, value):
        """고정 열 셀에 값을 할당한다. 고정 값은 두 단계 모두에서 알려져 있어야 한다."""
        self._check_column(column, ColumnKind.FIXED)
        stored = Value.wrap(value).assign(name)
        self._record(column, offset, stored)
        return AssignedCell(Cell(column, offset, self.index), Value.known(stored))

    def enable_selector(self, selector, offset):
        """offset 행에서 셀렉터를 켠다. 같은 행에 다시 켜도 결과는 같다."""
        self._check_open()
        if not self.layouter.schema.contains(selector):
            raise UnknownColumnError(selector, f"영역 '{self.name}'")
        if not selector.kind.is_selector:
            raise SynthesisError(f"셀렉터 열이 아닙니다: {selector!r}")
        self._check_offset(offset)
        self.selectors.add((selector, offset))

    def assign_advice_from_instance(self, name, instance_column, row, advice_column, offset):
        """공개 입력 셀의 값을 advice 셀로 가져오고 두 셀을 복사 제약으로 잇는다.

        Args:
            instance_column: 공개 입력 열
            row: 공개 입력 열의 절대 행
            advice_column, offset: 값을 받을 advice 셀

        Returns:
            AssignedCell
        """
        value = self.layouter.instance_value(instance_column, row)
        assigned = self.assign_advice(name, advice_column, offset, value)
        self.constrain_equal(assigned.cell, Cell(instance_column, row))
        return assigned

    def constrain_equal(self, left, right):
        """두 셀 사이에 복사 제약을 건다. 영역이 닫힐 때 확정된다."""
        self._check_open()
        left, right = _as_cell(left), _as_cell(right)
        # equality 플래그는 즉시 검사하고, 쌍은 영역이 배치될 때 등록한다
        self.layouter.tracker.check(left, right)
        self.copies.append((left, right))

    # ── 내부 ──

    def _check_open(self):
        if self.closed:
            raise SynthesisError(f"닫힌 영역 '{self.name}'을 사용했습니다")

    def _check_offset(self, offset):
        if isinstance(offset, bool) or not isinstance(offset, int) or offset < 0:
            raise RegionBoundsError(self.name, offset)

    def _check_column(self, column, kind):
        self._check_open()
        if not self.layouter.schema.contains(column):
            raise UnknownColumnError(column, f"영역 '{self.name}'")
        if column.kind != kind:
            raise SynthesisError(
                f"{kind.value} 열이 필요합니다: {column!r} ({column.kind.value})"
            )

    def _record(self, column, offset, stored):
        self._check_offset(offset)
        key = (column, offset)
        if key in self.cells:
            raise CellCollisionError(column, offset, self.name)
        self.cells[key] = stored

    def used_height(self):
        offsets = [offset for _, offset in self.cells]
        offsets += [offset for _, offset in self.selectors]
        used = max(offsets) + 1 if offsets else 0
        return max(used, self.height or 0)

    def enabled_gates(self):
        """이 영역이 켠 모든 게이트의 (게이트, 셀렉터 행) 목록."""
        schema = self.layouter.schema
        return [
            (gate, offset)
            for selector, offset in sorted(self.selectors, key=lambda s: (s[0].index, s[1]))
            for gate in schema.gates_for(selector)
        ]


class Layouter:
    """한 번의 할당 패스를 관리한다.

    영역을 열고 닫으며, 닫힌 영역을 플래너로 배치해 테이블에 기록한다.
    패스마다 새 Layouter, 새 플래너, 새 복사 제약 추적기를 사용하므로
    같은 CircuitSchema를 여러 패스가 공유해도 안전하다.
    """

    def __init__(self, schema, k, phase, instances=None, planner=None):
        self.schema = schema
        self.k = k
        self.n = table_height(k)
        self.phase = phase
        self.planner = planner if planner is not None else LinearPlanner()
        self.tracker = EqualityTracker(schema)

        self._instances = self._load_instances(instances)
        self._cells = {}
        self._enabled = {s: set() for s in schema.selectors}
        self._placements = []
        self._region_starts = {}
        self._namespace = []
        self._current = None
        self._next_index = 0

    # ── 공개 입력 ──

    def _load_instances(self, instances):
        columns = self.schema.instance_columns
        if self.phase == Phase.KEYGEN:
            return None
        instances = list(instances or [])
        if len(instances) != len(columns):
            raise InstanceError(
                f"공개 입력 열은 {len(columns)}개인데 값 목록은 {len(instances)}개입니다"
            )
        loaded = {}
        for column, values in zip(columns, instances):
            values = [to_fr(v) for v in values]
            if len(values) > self.n:
                raise InstanceError(
                    f"{column.name}: 공개 입력 {len(values)}개가 테이블 높이 {self.n}을 초과합니다"
                )
            loaded[column] = values + [FR(0)] * (self.n - len(values))
        return loaded

    def instance_value(self, column, row):
        """공개 입력 셀의 값. 키 생성 단계에서는 unknown."""
        if not self.schema.contains(column):
            raise UnknownColumnError(column, "instance_value")
        if column.kind != ColumnKind.INSTANCE:
            raise InstanceError(f"공개 입력 열이 아닙니다: {column!r}")
        if isinstance(row, bool) or not isinstance(row, int) or not 0 <= row < self.n:
            raise InstanceError(f"{column.name}: 행 {row}이 테이블 범위 [0, {self.n})를 벗어납니다")
        if self._instances is None:
            return Value.unknown()
        return Value.known(self._instances[column][row])

    def constrain_instance(self, cell, instance_column, row):
        """셀이 공개 입력 열의 row 행과 같도록 제약한다."""
        self.instance_value(instance_column, row)
        self.tracker.constrain_equal(_as_cell(cell), Cell(instance_column, row))

    # ── 영역 ──

    @contextmanager
    def namespace(self, name):
        """영역 이름 앞에 붙는 이름 공간. 진단용이며 배치에 영향이 없다."""
        self._namespace.append(name)
        try:
            yield self
        finally:
            self._namespace.pop()

    @contextmanager
    def region(self, name, height=None):
        """새 영역을 열고 블록이 끝나면 배치한다.

        Args:
            name: 영역 이름
            height: 최소 높이 (선택). 실제 높이는 사용한 오프셋에 따라 늘어날 수 있다.

        Yields:
            Region

        블록 안에서 예외가 나면 영역은 버려지고 예외가 그대로 전파된다.
        """
        if self._current is not None:
            raise SynthesisError(
                f"영역 '{self._current.name}' 안에서 다른 영역 '{name}'을 열 수 없습니다"
            )
        if height is not None and (isinstance(height, bool) or not isinstance(height, int) or height < 0):
            raise ValueError(f"영역 높이는 0 이상의 정수여야 합니다: {height!r}")

        full_name = "/".join(self._namespace + [name])
        region = Region(self, self._next_index, full_name, height)
        self._next_index += 1
        self._current = region
        try:
            yield region
        finally:
            self._current = None
            region.closed = True
        self._place(region)

    def _place(self, region):
        height = region.used_height()
        if height > self.n:
            raise RegionOverflowError(region.name, height, self.n)

        columns = {column for column, _ in region.cells}
        for gate, offset in region.enabled_gates():
            lo, hi = gate.rotation_span()
            if offset + lo < 0 or offset + hi >= height:
                raise RegionBoundsError(
                    region.name,
                    offset,
                    f"영역 '{region.name}'(높이 {height})의 행 {offset}에서 켜진 게이트 "
                    f"'{gate.name}'가 영역 밖의 행({offset + lo}..{offset + hi})을 쿼리합니다",
                )
            columns |= gate.queried_columns()
        columns |= {selector for selector, _ in region.selectors}

        shape = RegionShape(region.index, region.name, height, columns)
        start = self.planner.place(shape)
        if start + height > self.n:
            raise TableTooSmallError(region.name, start + height, self.n)

        cells = sorted(
            region.cells.items(), key=lambda item: (item[0][0].index, item[0][1])
        )
        # 충돌이 하나라도 있으면 테이블을 건드리지 않는다
        for (column, offset), _ in cells:
            if (column, start + offset) in self._cells:
                raise CellCollisionError(column, start + offset, region.name)

        for (column, offset), stored in cells:
            self._cells[(column, start + offset)] = stored
        for selector, offset in region.selectors:
            self._enabled[selector].add(start + offset)

        self._region_starts[region.index] = start
        for left, right in region.copies:
            self.tracker.constrain_equal(left, right)
        self._placements.append(
            RegionPlacement(region.index, region.name, start, height)
        )
        logger.debug(
            "placed region %d '%s' at row %d (height %d)", region.index, region.name, start, height
        )

    # ── 결과 ──

    def finish(self):
        """할당 패스를 끝내고 불변 결과를 만든다.

        Returns:
            KEYGEN: CircuitLayout
            WITNESS: WitnessTable
        """
        if self._current is not None:
            raise SynthesisError(f"영역 '{self._current.name}'이 아직 열려 있습니다")

        n = self.n
        fixed = {column: self._grid(column) for column in self.schema.fixed_columns}
        selectors = {}
        for selector in self.schema.selectors:
            rows = self._enabled[selector]
            selectors[selector] = tuple(row in rows for row in range(n))
        copies = self.tracker.resolve(self._region_starts)

        layout = CircuitLayout(
            self.k, self.schema, fixed, selectors, copies, self._placements
        )
        if self.phase == Phase.KEYGEN:
            return layout

        advice = {column: self._grid(column) for column in self.schema.advice_columns}
        instance = {column: tuple(values) for column, values in self._instances.items()}
        return WitnessTable(layout, advice, instance)

    def _grid(self, column):
        # 할당되지 않은 셀은 0
        values = []
        for row in range(self.n):
            value = self._cells.get((column, row))
            values.append(FR(0) if value is None else value)
        return tuple(values)
