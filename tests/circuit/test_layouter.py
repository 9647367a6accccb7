"""
레이아웃 (layouter.py, planner.py) 테스트.

테스트 대상:
  - Region: 할당, 셀렉터, 충돌, 오프셋 검사, 닫힌 영역
  - Layouter: 영역 배치, 이름 공간, 예외 시 영역 폐기, 공개 입력
  - 영역 검증: RegionBoundsError, RegionOverflowError, TableTooSmallError
  - LinearPlanner / ColumnPackingPlanner
"""

import pytest
from plonkish.circuit.constraint_system import ConstraintSystem
from plonkish.circuit.column import Cell, Column, ColumnKind
from plonkish.circuit.field import FR
from plonkish.circuit.layouter import Layouter, Phase
from plonkish.circuit.planner import ColumnPackingPlanner, LinearPlanner, Planner
from plonkish.circuit.value import Value
from plonkish.circuit.errors import (
    CellCollisionError,
    EqualityNotEnabledError,
    InstanceError,
    RegionBoundsError,
    RegionOverflowError,
    SynthesisError,
    TableTooSmallError,
    UnknownColumnError,
    WitnessMissingError,
)


class Cols:
    """테스트용 스키마와 열 묶음."""

    def __init__(self):
        cs = ConstraintSystem()
        self.a = cs.advice_column("a")
        self.b = cs.advice_column("b")
        self.f = cs.fixed_column("f")
        self.i = cs.instance_column("i")
        self.s = cs.selector("s")
        self.t = cs.selector("t")
        cs.enable_equality(self.a)
        cs.enable_equality(self.i)
        cs.add_gate("add", self.s, self.a.cur() + self.b.cur())
        cs.add_gate("step", self.t, self.a.cur() - self.a.next())
        self.schema = cs.finalize()


@pytest.fixture
def cols():
    return Cols()


def keygen_layouter(cols, k=4, planner=None):
    return Layouter(cols.schema, k, Phase.KEYGEN, planner=planner)


def witness_layouter(cols, k=4, instances=None, planner=None):
    if instances is None:
        instances = [[]]
    return Layouter(cols.schema, k, Phase.WITNESS, instances, planner)


class OverlapPlanner(Planner):
    """모든 영역을 0행에 놓는 잘못된 플래너."""

    def place(self, shape):
        return 0


# ─────────────────────────────────────────────────────────────────────
# Region 할당
# ─────────────────────────────────────────────────────────────────────

class TestRegionAssign:
    """영역 안에서의 셀 할당 테스트."""

    def test_keygen_withholds_advice(self, cols):
        """키 생성 단계의 advice 값은 unknown이다."""
        lay = keygen_layouter(cols)
        with lay.region("r") as region:
            cell = region.assign_advice("x", cols.a, 0, Value.known(5))
        assert not cell.value.is_known()
        assert cell.cell == Cell(cols.a, 0, 0)

    def test_keygen_accepts_unknown_advice(self, cols):
        lay = keygen_layouter(cols)
        with lay.region("r") as region:
            region.assign_advice("x", cols.a, 0, None)
        layout = lay.finish()
        assert len(layout.regions) == 1

    def test_witness_records_advice(self, cols):
        lay = witness_layouter(cols)
        with lay.region("r") as region:
            cell = region.assign_advice("x", cols.a, 1, 7)
        assert cell.value == Value.known(7)
        table = lay.finish()
        assert table.value(cols.a, 1) == FR(7)

    def test_witness_missing_value(self, cols):
        """위트니스 단계에서 unknown을 할당하면 WitnessMissingError."""
        lay = witness_layouter(cols)
        with pytest.raises(WitnessMissingError):
            with lay.region("r") as region:
                region.assign_advice("x", cols.a, 0, Value.unknown())

    def test_fixed_recorded_in_keygen(self, cols):
        """고정 값은 키 생성 단계에서도 기록된다."""
        lay = keygen_layouter(cols)
        with lay.region("r") as region:
            cell = region.assign_fixed("c", cols.f, 2, 9)
        assert cell.value == Value.known(9)
        layout = lay.finish()
        assert layout.fixed[cols.f][2] == FR(9)
        assert layout.fixed[cols.f][0] == FR(0)

    def test_fixed_must_be_known(self, cols):
        lay = keygen_layouter(cols)
        with pytest.raises(WitnessMissingError):
            with lay.region("r") as region:
                region.assign_fixed("c", cols.f, 0, None)

    def test_wrong_column_kind(self, cols):
        lay = witness_layouter(cols)
        with pytest.raises(SynthesisError):
            with lay.region("r") as region:
                region.assign_advice("x", cols.f, 0, 1)

    def test_unregistered_selector(self, cols):
        stray = Column(99, ColumnKind.SELECTOR)
        lay = witness_layouter(cols)
        with pytest.raises(UnknownColumnError):
            with lay.region("r") as region:
                region.enable_selector(stray, 0)

    def test_collision_in_region(self, cols):
        """같은 영역에서 같은 셀에 두 번 할당하면 CellCollisionError."""
        lay = witness_layouter(cols)
        with pytest.raises(CellCollisionError) as exc:
            with lay.region("dup") as region:
                region.assign_advice("x", cols.a, 0, 1)
                region.assign_advice("y", cols.a, 0, 2)
        assert exc.value.region == "dup"
        assert exc.value.row == 0

    def test_negative_offset(self, cols):
        lay = witness_layouter(cols)
        with pytest.raises(RegionBoundsError):
            with lay.region("r") as region:
                region.assign_advice("x", cols.a, -1, 1)

    def test_enable_selector_idempotent(self, cols):
        lay = keygen_layouter(cols)
        with lay.region("r") as region:
            region.assign_advice("a", cols.a, 0, None)
            region.assign_advice("b", cols.b, 0, None)
            region.enable_selector(cols.s, 0)
            cols.s.enable(region, 0)
        layout = lay.finish()
        assert layout.enabled_rows(cols.s) == [0]

    def test_closed_region(self, cols):
        """블록을 벗어난 영역을 사용하면 SynthesisError."""
        lay = witness_layouter(cols)
        with lay.region("r") as region:
            region.assign_advice("x", cols.a, 0, 1)
        with pytest.raises(SynthesisError):
            region.assign_advice("y", cols.a, 1, 1)

    def test_constrain_equal_requires_equality(self, cols):
        """equality가 꺼진 열의 복사 제약은 즉시 거부된다."""
        lay = witness_layouter(cols)
        with pytest.raises(EqualityNotEnabledError) as exc:
            with lay.region("r") as region:
                x = region.assign_advice("x", cols.a, 0, 1)
                y = region.assign_advice("y", cols.b, 0, 1)
                region.constrain_equal(x, y)
        assert exc.value.column == cols.b


# ─────────────────────────────────────────────────────────────────────
# Layouter 영역 관리
# ─────────────────────────────────────────────────────────────────────

class TestLayouterRegions:
    """영역 배치와 생명주기 테스트."""

    def test_linear_placement(self, cols):
        lay = keygen_layouter(cols)
        with lay.region("one") as region:
            region.assign_advice("x", cols.a, 0, None)
        with lay.region("three") as region:
            region.assign_advice("x", cols.a, 2, None)
        layout = lay.finish()
        assert [(r.name, r.start, r.height) for r in layout.regions] == [
            ("one", 0, 1), ("three", 1, 3),
        ]
        assert layout.used_rows == 4

    def test_explicit_height(self, cols):
        lay = keygen_layouter(cols)
        with lay.region("tall", height=5) as region:
            region.assign_advice("x", cols.a, 0, None)
        with lay.region("next"):
            pass
        layout = lay.finish()
        assert layout.regions[0].height == 5
        assert layout.regions[1].start == 5

    def test_empty_region(self, cols):
        lay = keygen_layouter(cols)
        with lay.region("empty"):
            pass
        layout = lay.finish()
        assert layout.regions[0].height == 0
        assert layout.used_rows == 0

    def test_invalid_height(self, cols):
        lay = keygen_layouter(cols)
        with pytest.raises(ValueError):
            with lay.region("bad", height=-1):
                pass

    def test_nested_region(self, cols):
        lay = keygen_layouter(cols)
        with pytest.raises(SynthesisError):
            with lay.region("outer"):
                with lay.region("inner"):
                    pass

    def test_failed_region_is_discarded(self, cols):
        """블록 안에서 예외가 나면 영역과 그 복사 제약은 버려진다."""
        lay = witness_layouter(cols)
        with pytest.raises(RuntimeError):
            with lay.region("broken") as region:
                x = region.assign_advice("x", cols.a, 0, 1)
                region.constrain_equal(x, Cell(cols.i, 0))
                raise RuntimeError("boom")
        with lay.region("ok") as region:
            region.assign_advice("x", cols.a, 0, 2)
        table = lay.finish()
        assert [(r.name, r.start) for r in table.regions] == [("ok", 0)]
        assert table.copies == ()
        assert table.value(cols.a, 0) == FR(2)

    def test_namespace_prefix(self, cols):
        lay = keygen_layouter(cols)
        with lay.namespace("fibo"):
            with lay.namespace("step"):
                with lay.region("row"):
                    pass
        with lay.region("plain"):
            pass
        layout = lay.finish()
        assert [r.name for r in layout.regions] == ["fibo/step/row", "plain"]

    def test_unassigned_cells_are_zero(self, cols):
        lay = witness_layouter(cols, k=2)
        with lay.region("r") as region:
            region.assign_advice("x", cols.a, 1, 3)
        table = lay.finish()
        assert table.column_values(cols.a) == (FR(0), FR(3), FR(0), FR(0))
        assert table.column_values(cols.b) == (FR(0),) * 4


# ─────────────────────────────────────────────────────────────────────
# 영역 검증
# ─────────────────────────────────────────────────────────────────────

class TestRegionValidation:
    """영역이 닫힐 때의 검증 테스트."""

    def test_gate_query_leaves_region(self, cols):
        """켜진 게이트가 영역 밖의 행을 쿼리하면 RegionBoundsError."""
        lay = keygen_layouter(cols)
        with pytest.raises(RegionBoundsError) as exc:
            with lay.region("step") as region:
                region.assign_advice("x", cols.a, 0, None)
                region.enable_selector(cols.t, 0)
        assert exc.value.region == "step"
        assert exc.value.offset == 0

    def test_gate_query_inside_region(self, cols):
        lay = keygen_layouter(cols)
        with lay.region("step") as region:
            region.assign_advice("x", cols.a, 0, None)
            region.assign_advice("y", cols.a, 1, None)
            region.enable_selector(cols.t, 0)
        layout = lay.finish()
        assert layout.regions[0].height == 2
        assert layout.is_enabled(cols.t, 0)
        assert not layout.is_enabled(cols.t, 1)

    def test_region_overflow(self, cols):
        """영역 높이가 2^k를 넘으면 RegionOverflowError."""
        lay = keygen_layouter(cols, k=1)
        with pytest.raises(RegionOverflowError) as exc:
            with lay.region("big") as region:
                region.assign_advice("x", cols.a, 2, None)
        assert exc.value.height == 3
        assert exc.value.n == 2

    def test_table_exactly_full(self, cols):
        lay = keygen_layouter(cols, k=2)
        for _ in range(4):
            with lay.region("row") as region:
                region.assign_advice("x", cols.a, 0, None)
        assert lay.finish().used_rows == 4

    def test_table_too_small(self, cols):
        """배치 끝이 2^k를 넘으면 TableTooSmallError (필요 행 수 포함)."""
        lay = keygen_layouter(cols, k=2)
        for _ in range(4):
            with lay.region("row") as region:
                region.assign_advice("x", cols.a, 0, None)
        with pytest.raises(TableTooSmallError) as exc:
            with lay.region("extra") as region:
                region.assign_advice("x", cols.a, 0, None)
        assert exc.value.region == "extra"
        assert exc.value.required == 5
        assert exc.value.n == 4

    def test_cross_region_collision(self, cols):
        """두 영역의 셀이 같은 절대 셀에 놓이면 CellCollisionError."""
        lay = keygen_layouter(cols, planner=OverlapPlanner())
        with lay.region("first") as region:
            region.assign_advice("x", cols.a, 0, None)
        with pytest.raises(CellCollisionError) as exc:
            with lay.region("second") as region:
                region.assign_advice("y", cols.a, 0, None)
        assert exc.value.region == "second"
        assert exc.value.row == 0

    def test_collision_leaves_table_unchanged(self, cols):
        """충돌한 영역의 셀, 셀렉터, 복사 제약은 하나도 기록되지 않는다.

        a가 b보다 먼저 기록되므로 충돌 전의 a[0]도 남으면 안 된다.
        """
        lay = witness_layouter(cols, planner=OverlapPlanner())
        with lay.region("first") as region:
            region.assign_advice("x", cols.b, 0, 3)
        with pytest.raises(CellCollisionError) as exc:
            with lay.region("second") as region:
                x = region.assign_advice("x", cols.a, 0, 5)
                region.assign_advice("y", cols.b, 0, 6)
                region.enable_selector(cols.s, 0)
                region.constrain_equal(x, Cell(cols.i, 0))
        assert exc.value.column == cols.b
        table = lay.finish()
        assert table.value(cols.a, 0) == FR(0)
        assert table.value(cols.b, 0) == FR(3)
        assert [r.name for r in table.regions] == ["first"]
        assert table.copies == ()
        assert not table.is_enabled(cols.s, 0)

    def test_finish_with_open_region(self, cols):
        lay = keygen_layouter(cols)
        with pytest.raises(SynthesisError):
            with lay.region("open"):
                lay.finish()


# ─────────────────────────────────────────────────────────────────────
# 공개 입력
# ─────────────────────────────────────────────────────────────────────

class TestInstances:
    """공개 입력 열 로딩 테스트."""

    def test_padding(self, cols):
        lay = witness_layouter(cols, k=2, instances=[[1, 2]])
        assert lay.instance_value(cols.i, 1) == Value.known(2)
        table = lay.finish()
        assert table.column_values(cols.i) == (FR(1), FR(2), FR(0), FR(0))

    def test_keygen_instance_unknown(self, cols):
        lay = keygen_layouter(cols)
        assert not lay.instance_value(cols.i, 0).is_known()

    def test_wrong_column_count(self, cols):
        with pytest.raises(InstanceError):
            witness_layouter(cols, instances=[[1], [2]])

    def test_too_many_values(self, cols):
        with pytest.raises(InstanceError):
            witness_layouter(cols, k=1, instances=[[1, 2, 3]])

    def test_row_out_of_range(self, cols):
        lay = witness_layouter(cols, k=2, instances=[[1]])
        with pytest.raises(InstanceError):
            lay.instance_value(cols.i, 4)

    def test_not_instance_column(self, cols):
        lay = witness_layouter(cols)
        with pytest.raises(InstanceError):
            lay.instance_value(cols.a, 0)

    def test_assign_from_instance(self, cols):
        """공개 입력 값을 advice로 가져오면 복사 제약이 함께 기록된다."""
        lay = witness_layouter(cols, instances=[[0, 42]])
        with lay.region("load") as region:
            cell = region.assign_advice_from_instance("x", cols.i, 1, cols.a, 0)
        assert cell.value == Value.known(42)
        table = lay.finish()
        assert table.copies == ((Cell(cols.a, 0), Cell(cols.i, 1)),)

    def test_constrain_instance(self, cols):
        lay = witness_layouter(cols, instances=[[5]])
        with lay.region("r") as region:
            region.assign_advice("pad", cols.a, 0, 0)
            cell = region.assign_advice("x", cols.a, 1, 5)
        lay.constrain_instance(cell, cols.i, 0)
        table = lay.finish()
        assert table.copies == ((Cell(cols.a, 1), Cell(cols.i, 0)),)


# ─────────────────────────────────────────────────────────────────────
# 배치 전략
# ─────────────────────────────────────────────────────────────────────

def _three_regions(lay, cols):
    with lay.region("a0") as region:
        region.assign_advice("x", cols.a, 0, None)
    with lay.region("b01") as region:
        region.assign_advice("x", cols.b, 0, None)
        region.assign_advice("y", cols.b, 1, None)
    with lay.region("a1") as region:
        region.assign_advice("x", cols.a, 0, None)
    return lay.finish()


class TestPlanners:
    """LinearPlanner / ColumnPackingPlanner 테스트."""

    def test_linear_planner(self, cols):
        layout = _three_regions(keygen_layouter(cols, planner=LinearPlanner()), cols)
        assert [r.start for r in layout.regions] == [0, 1, 3]

    def test_column_packing_planner(self, cols):
        """서로 다른 열만 쓰는 영역은 같은 행을 공유한다."""
        layout = _three_regions(keygen_layouter(cols, planner=ColumnPackingPlanner()), cols)
        assert [r.start for r in layout.regions] == [0, 0, 1]
        assert layout.used_rows == 2

    def test_packing_respects_gate_columns(self, cols):
        """켜진 게이트가 쿼리하는 열도 영역이 차지한 열로 본다."""
        lay = keygen_layouter(cols, planner=ColumnPackingPlanner())
        with lay.region("a only") as region:
            region.assign_advice("x", cols.a, 0, None)
        with lay.region("gate") as region:
            region.assign_advice("y", cols.b, 0, None)
            region.enable_selector(cols.s, 0)
        layout = lay.finish()
        assert [r.start for r in layout.regions] == [0, 1]
        assert layout.enabled_rows(cols.s) == [1]

    def test_planners_preserve_copy_semantics(self, cols):
        """배치 전략과 무관하게 복사 제약은 같은 셀 값을 가리킨다."""
        results = []
        for planner in (LinearPlanner(), ColumnPackingPlanner()):
            lay = witness_layouter(cols, instances=[[9]], planner=planner)
            with lay.region("pad") as region:
                region.assign_advice("p", cols.b, 0, 1)
                region.assign_advice("q", cols.b, 1, 1)
            with lay.region("load") as region:
                region.assign_advice_from_instance("x", cols.i, 0, cols.a, 0)
            table = lay.finish()
            ((left, right),) = table.copies
            results.append((left.row, table.cell_value(left), table.cell_value(right)))
        assert results[0][0] == 2
        assert results[1][0] == 0
        for _, left_value, right_value in results:
            assert left_value == right_value == FR(9)
