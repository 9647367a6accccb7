"""
PLONKish 회로 스키마 (Constraint System)
========================================

회로의 "모양"을 기술한다: 어떤 열이 있고, 어떤 게이트가 어떤 셀렉터로
켜지는지. 위트니스 값과 무관하며 회로 종류마다 한 번만 만들어진다.

**구성 흐름**:
  1. ConstraintSystem(빌더)에 열과 게이트를 등록한다.
  2. finalize()로 읽기 전용 CircuitSchema를 얻는다.
  3. 같은 CircuitSchema를 키 생성과 여러 번의 위트니스 생성에서 재사용한다.

**게이트**:
  게이트는 지배 셀렉터 s와 제약식 목록 [e₀, e₁, ...]로 구성된다.
  s가 1인 모든 행에서 각 eᵢ가 0이어야 한다:

    s · eᵢ = 0    (모든 행)

  게이트 이름은 진단용일 뿐이므로 중복을 허용한다.

**예제 (피보나치, 3열)**:
    >>> cs = ConstraintSystem()
    >>> a, b, c = cs.advice_column(), cs.advice_column(), cs.advice_column()
    >>> s = cs.selector()
    >>> for col in (a, b, c):
    ...     cs.enable_equality(col)
    >>> cs.add_gate("add", s, a.cur() + b.cur() - c.cur())
    >>> schema = cs.finalize()
"""

from plonkish.circuit.column import Column, ColumnKind
from plonkish.circuit.errors import (
    SchemaFinalizedError,
    SelectorMisuseError,
    UnknownColumnError,
)
from plonkish.circuit.expression import Expression


class Gate:
    """셀렉터로 켜지는 다항식 제약 묶음.

    속성:
        name: 진단용 게이트 이름
        selector: 지배 셀렉터 열
        constraints: (제약 이름, Expression) 튜플의 튜플
    """

    def __init__(self, name, selector, constraints):
        self.name = name
        self.selector = selector
        self.constraints = tuple(constraints)

    def polynomials(self):
        """셀렉터를 곱한 제약 다항식 목록 [s·e₀, s·e₁, ...]을 반환한다."""
        return [self.selector.cur() * expr for _, expr in self.constraints]

    def queries(self):
        """게이트의 모든 쿼리 (셀렉터 제외, 중복 없음)."""
        seen = set()
        result = []
        for _, expr in self.constraints:
            for q in expr.queries():
                key = (q.column, q.rotation)
                if key not in seen:
                    seen.add(key)
                    result.append(q)
        return result

    def queried_columns(self):
        """게이트가 쿼리하는 열 집합 (지배 셀렉터 포함)."""
        return frozenset([q.column for q in self.queries()] + [self.selector])

    def rotation_span(self):
        """쿼리 회전의 (최소, 최대) 오프셋. 셀렉터 행(0)을 항상 포함한다."""
        offsets = [q.rotation.offset for q in self.queries()] + [0]
        return min(offsets), max(offsets)

    def degree(self):
        """셀렉터를 포함한 게이트의 최대 차수."""
        return 1 + max((expr.degree() for _, expr in self.constraints), default=0)

    def __repr__(self):
        return f"Gate({self.name!r}, selector={self.selector.name})"


class CircuitSchema:
    """확정된 회로 스키마. 생성 후 변경할 수 없다.

    속성:
        columns: 모든 열 (생성 순서)
        gates: 모든 게이트 (등록 순서)
        equality_columns: equality가 활성화된 열의 frozenset
    """

    def __init__(self, columns, gates, equality_columns):
        object.__setattr__(self, "columns", tuple(columns))
        object.__setattr__(self, "gates", tuple(gates))
        object.__setattr__(self, "equality_columns", frozenset(equality_columns))

    def __setattr__(self, name, value):
        raise SchemaFinalizedError(f"{name} 설정")

    def __delattr__(self, name):
        raise SchemaFinalizedError(f"{name} 삭제")

    def columns_of(self, kind):
        return tuple(c for c in self.columns if c.kind == kind)

    @property
    def advice_columns(self):
        return self.columns_of(ColumnKind.ADVICE)

    @property
    def fixed_columns(self):
        return self.columns_of(ColumnKind.FIXED)

    @property
    def instance_columns(self):
        return self.columns_of(ColumnKind.INSTANCE)

    @property
    def selectors(self):
        return tuple(c for c in self.columns if c.kind.is_selector)

    @property
    def degree(self):
        """모든 게이트의 최대 차수 (게이트가 없으면 1)."""
        return max((g.degree() for g in self.gates), default=1)

    def contains(self, column):
        return (
            isinstance(column, Column)
            and 0 <= column.index < len(self.columns)
            and self.columns[column.index] == column
        )

    def is_equality_enabled(self, column):
        return column in self.equality_columns

    def gates_for(self, selector):
        """selector가 지배하는 게이트 목록."""
        return [g for g in self.gates if g.selector == selector]

    def __repr__(self):
        return (
            f"CircuitSchema(columns={len(self.columns)}, gates={len(self.gates)}, "
            f"equality={len(self.equality_columns)})"
        )


class ConstraintSystem:
    """회로 스키마 빌더.

    열과 게이트를 메서드 호출로 등록하고, finalize()로
    읽기 전용 CircuitSchema를 만든다. 확정 이후의 모든 수정은
    SchemaFinalizedError를 낸다.
    """

    def __init__(self):
        self._columns = []
        self._gates = []
        self._equality = []
        self._schema = None

    # ── 열 등록 ──

    def add_column(self, kind, name=None):
        """kind 종류의 새 열을 추가한다.

        Args:
            kind: ColumnKind
            name: 진단용 이름 (선택)

        Returns:
            Column
        """
        self._check_open("add_column")
        if not isinstance(kind, ColumnKind):
            raise TypeError(f"ColumnKind가 아닙니다: {kind!r}")
        column = Column(len(self._columns), kind, name)
        self._columns.append(column)
        return column

    def advice_column(self, name=None):
        return self.add_column(ColumnKind.ADVICE, name)

    def fixed_column(self, name=None):
        return self.add_column(ColumnKind.FIXED, name)

    def instance_column(self, name=None):
        return self.add_column(ColumnKind.INSTANCE, name)

    def selector(self, name=None):
        """단순 셀렉터: 게이트의 지배 셀렉터로만 사용할 수 있다."""
        return self.add_column(ColumnKind.SELECTOR, name)

    def complex_selector(self, name=None):
        """복합 셀렉터: 다른 게이트의 제약식 안에서도 쿼리할 수 있다."""
        return self.add_column(ColumnKind.COMPLEX_SELECTOR, name)

    def enable_equality(self, column):
        """열에 equality(복사 제약) 참여를 허용한다. 여러 번 호출해도 같다."""
        self._check_open("enable_equality")
        self._check_known(column, "enable_equality")
        if column.kind.is_selector:
            raise SelectorMisuseError(f"셀렉터 열에는 equality를 켤 수 없습니다: {column!r}")
        if column not in self._equality:
            self._equality.append(column)

    # ── 게이트 등록 ──

    def add_gate(self, name, selector, constraints):
        """게이트를 등록한다.

        Args:
            name: 진단용 이름 (중복 허용)
            selector: 지배 셀렉터 열 (SELECTOR 또는 COMPLEX_SELECTOR)
            constraints: Expression 하나, Expression 목록,
                         또는 (이름, Expression) 쌍 목록

        Returns:
            Gate

        Raises:
            UnknownColumnError: 등록되지 않은 열을 쿼리할 때
            SelectorMisuseError: 셀렉터 사용 규칙을 어길 때
        """
        self._check_open("add_gate")
        self._check_known(selector, f"게이트 '{name}'의 셀렉터")
        if not selector.kind.is_selector:
            raise SelectorMisuseError(
                f"게이트 '{name}'의 지배 셀렉터가 셀렉터 열이 아닙니다: {selector!r}", name
            )

        named = self._normalize_constraints(name, constraints)
        if not named:
            raise ValueError(f"게이트 '{name}'에 제약식이 없습니다")

        for _, expr in named:
            for query in expr.queries():
                self._check_known(query.column, f"게이트 '{name}'")
                if query.column.kind.is_selector:
                    if query.rotation.offset != 0:
                        raise SelectorMisuseError(
                            f"게이트 '{name}': 셀렉터는 현재 행에서만 쿼리할 수 있습니다", name
                        )
                    if query.column.kind == ColumnKind.SELECTOR:
                        raise SelectorMisuseError(
                            f"게이트 '{name}': 단순 셀렉터 {query.column.name}는 "
                            "제약식 안에서 사용할 수 없습니다", name
                        )

        gate = Gate(name, selector, named)
        self._gates.append(gate)
        return gate

    @staticmethod
    def _normalize_constraints(name, constraints):
        if isinstance(constraints, Expression):
            constraints = [constraints]
        named = []
        for i, item in enumerate(constraints):
            if isinstance(item, tuple):
                label, expr = item
            else:
                label, expr = f"{name}[{i}]", item
            if not isinstance(expr, Expression):
                raise TypeError(f"게이트 '{name}'의 제약식이 Expression이 아닙니다: {expr!r}")
            named.append((label, expr))
        return named

    # ── 확정 ──

    def finalize(self):
        """읽기 전용 CircuitSchema를 반환한다. 두 번째 호출은 같은 객체를 돌려준다."""
        if self._schema is None:
            equality = sorted(self._equality)
            self._schema = CircuitSchema(self._columns, self._gates, equality)
        return self._schema

    @property
    def finalized(self):
        return self._schema is not None

    def _check_open(self, operation):
        if self._schema is not None:
            raise SchemaFinalizedError(operation)

    def _check_known(self, column, context):
        if (
            not isinstance(column, Column)
            or not 0 <= column.index < len(self._columns)
            or self._columns[column.index] is not column
        ):
            raise UnknownColumnError(column, context)
