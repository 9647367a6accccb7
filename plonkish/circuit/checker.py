"""
제약 만족 검사 (Satisfiability Check)
=====================================

완성된 WitnessTable이 회로의 모든 제약을 만족하는지 직접 확인한다.
다항식 커밋먼트 없이 테이블 값만으로 검사하므로 회로 디버깅에 쓰인다.

**게이트 검사**:
  각 게이트의 셀렉터가 켜진 모든 행 r에서, 각 제약식 e를
  "쿼리 (열, 회전) → table[열][r + 회전]" 해석으로 평가해 0인지 확인한다.

**복사 제약 검사**:
  모든 복사 제약 쌍 (A, B)에서 table[A] == table[B]인지 확인한다.

실패는 예외 대신 실패 객체 목록으로 모은다. 호출자는 이를
UnsatisfiedConstraintError로 감싸 보고한다.
"""

from plonkish.circuit.field import FR


class ConstraintNotSatisfied:
    """활성 행에서 게이트 제약식이 0이 아니다.

    속성:
        gate: 게이트 이름
        constraint: 제약식 이름
        row: 셀렉터가 켜진 절대 행
        region: 그 행을 포함하는 영역 이름 (없으면 None)
        cell_values: 제약식이 읽은 셀들의 [(쿼리 문자열, int 값)]
    """

    def __init__(self, gate, constraint, row, region, cell_values):
        self.gate = gate
        self.constraint = constraint
        self.row = row
        self.region = region
        self.cell_values = cell_values

    def __str__(self):
        cells = ", ".join(f"{q}={v}" for q, v in self.cell_values)
        where = f" (영역 '{self.region}')" if self.region else ""
        return (
            f"게이트 '{self.gate}'의 제약 '{self.constraint}'이 행 {self.row}{where}에서 "
            f"만족되지 않습니다: {cells}"
        )

    def __repr__(self):
        return f"ConstraintNotSatisfied({self.gate!r}, {self.constraint!r}, row={self.row})"


class PermutationNotSatisfied:
    """복사 제약으로 묶인 두 셀의 값이 다르다."""

    def __init__(self, left, right, left_value, right_value):
        self.left = left
        self.right = right
        self.left_value = left_value
        self.right_value = right_value

    def __str__(self):
        return (
            f"복사 제약이 만족되지 않습니다: {self.left!r}={self.left_value} != "
            f"{self.right!r}={self.right_value}"
        )

    def __repr__(self):
        return f"PermutationNotSatisfied({self.left!r}, {self.right!r})"


def region_at(table, row):
    """row를 포함하는 첫 번째 영역의 이름."""
    for placement in table.regions:
        if placement.start <= row < placement.end:
            return placement.name
    return None


def check_gates(table):
    """모든 게이트를 셀렉터가 켜진 행에서 평가한다."""
    failures = []
    n = table.n
    for gate in table.schema.gates:
        for row in table.layout.enabled_rows(gate.selector):

            def resolve(query, row=row):
                return table.value(query.column, (row + query.rotation.offset) % n)

            for label, expr in gate.constraints:
                if expr.evaluate(resolve) == FR(0):
                    continue
                cell_values = [(str(q), int(resolve(q))) for q in expr.queries()]
                failures.append(
                    ConstraintNotSatisfied(gate.name, label, row, region_at(table, row), cell_values)
                )
    return failures


def check_copies(table):
    """모든 복사 제약 쌍의 값이 같은지 확인한다."""
    failures = []
    for left, right in table.copies:
        left_value = table.cell_value(left)
        right_value = table.cell_value(right)
        if left_value != right_value:
            failures.append(
                PermutationNotSatisfied(left, right, int(left_value), int(right_value))
            )
    return failures


def verify_table(table):
    """게이트와 복사 제약을 모두 검사한다.

    Returns:
        list: 실패 객체 목록 (모두 만족하면 빈 목록)
    """
    return check_gates(table) + check_copies(table)
