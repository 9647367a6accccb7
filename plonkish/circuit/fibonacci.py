"""
피보나치 예제 회로
==================

"f(0) = x, f(1) = y가 주어졌을 때 f(9) = z임을 증명"하는 세 가지 회로.
엔진 설계를 검증하는 예제이며, 세 회로는 같은 계산을 서로 다른
테이블 모양으로 표현한다.

**1. FibonacciRowsCircuit** (3 advice 열, 행마다 영역 하나):

  | a    | b    | c    | s |
  |------|------|------|---|
  | f(0) | f(1) | f(2) | 1 |   ← 영역 "first row"
  | f(1) | f(2) | f(3) | 1 |   ← 영역 "next row"  (a, b는 윗 영역에서 복사)
  | ...  | ...  | ...  | 1 |

  게이트: s · (a + b - c) = 0
  복사 제약: 현재 행의 a ← 두 행 위의 c (1행은 0행의 b), 현재 행의 b ← 이전 행의 c
  값이 처음 할당된 셀에서 복사하므로 동치류는 c₀ = b₁ = a₂, c₁ = b₂ = a₃, ... 이다.

**2. FibonacciPublicRowsCircuit** (1번 + instance 열):
  f(0), f(1), 마지막 c를 공개 입력 [x, y, z]의 0, 1, 2행에 복사 제약으로 묶는다.

**3. FibonacciColumnCircuit** (advice 열 하나, 영역 하나):

  | a     | s |
  |-------|---|
  | f(0)  | 1 |   게이트: s · (a[cur] + a[next] - a[next+1]) = 0
  | f(1)  | 1 |
  | f(2)  | 1 |   셀렉터는 마지막 두 행을 제외한 모든 행에서 켜진다.
  | ...   |   |   게이트가 아래 두 행을 쿼리하므로 영역 하나가 표 전체를 덮는다.
  | f(9)  | 0 |

  f(0), f(1)은 instance 0, 1행에서 가져오고 f(9)는 instance 2행과 묶는다.
"""

from plonkish.circuit.circuit import Circuit
from plonkish.circuit.value import Value


def fibonacci(count, a=1, b=1):
    """f(0)=a, f(1)=b로 시작하는 피보나치 수열의 처음 count개를 반환한다.

    예시:
        >>> fibonacci(10)  # [1, 1, 2, 3, 5, 8, 13, 21, 34, 55]
    """
    values = []
    for _ in range(count):
        values.append(a)
        a, b = b, a + b
    return values


# ─────────────────────────────────────────────────────────────────────
# 1, 2. 행 단위 회로
# ─────────────────────────────────────────────────────────────────────

class FiboRowsConfig:
    """행 단위 회로의 config: advice 열 3개, 셀렉터, (선택) instance 열."""

    def __init__(self, advice, selector, instance=None):
        self.advice = advice
        self.selector = selector
        self.instance = instance


class FibonacciRowsCircuit(Circuit):
    """3열 피보나치 회로.

    Args:
        a, b: f(0), f(1) (None이면 unknown, 키 생성용)
        nrows: 게이트가 켜지는 행 수. 기본값 8이면 f(2)..f(9)를 계산한다.
    """

    def __init__(self, a=None, b=None, nrows=8):
        if nrows < 1:
            raise ValueError(f"nrows는 1 이상이어야 합니다: {nrows}")
        self.a = Value.wrap(a)
        self.b = Value.wrap(b)
        self.nrows = nrows

    def without_witnesses(self):
        return type(self)(nrows=self.nrows)

    @classmethod
    def configure(cls, cs):
        col_a = cs.advice_column("a")
        col_b = cs.advice_column("b")
        col_c = cs.advice_column("c")
        selector = cs.selector("s_add")

        for column in (col_a, col_b, col_c):
            cs.enable_equality(column)

        cs.add_gate("add", selector, col_a.cur() + col_b.cur() - col_c.cur())
        return FiboRowsConfig([col_a, col_b, col_c], selector)

    def assign_first_row(self, config, layouter):
        """첫 행: a, b를 할당하고 c = a + b를 계산한다."""
        col_a, col_b, col_c = config.advice
        with layouter.region("first row") as region:
            region.enable_selector(config.selector, 0)
            a_cell = region.assign_advice("a", col_a, 0, self.a)
            b_cell = region.assign_advice("b", col_b, 0, self.b)
            c_cell = region.assign_advice("c", col_c, 0, self.a + self.b)
        return a_cell, b_cell, c_cell

    def assign_row(self, config, layouter, prev_b, prev_c):
        """다음 행: 이전 행의 b, c 값을 a, b로 복사하고 c = a + b를 계산한다.

        prev_b, prev_c는 그 값을 처음 할당한 셀이다 (prev_b는 보통 두 행 위의 c).
        """
        col_a, col_b, col_c = config.advice
        with layouter.region("next row") as region:
            region.enable_selector(config.selector, 0)
            prev_b.copy_advice("a", region, col_a, 0)
            prev_c.copy_advice("b", region, col_b, 0)
            c_cell = region.assign_advice("c", col_c, 0, prev_b.value + prev_c.value)
        return c_cell

    def synthesize(self, config, layouter):
        self.output = self.assign_rows(config, layouter)[-1]

    def assign_rows(self, config, layouter):
        """모든 행을 할당하고 (f(0) 셀, f(1) 셀, ..., 마지막 c 셀) 목록을 반환한다."""
        with layouter.namespace("first row"):
            a_cell, prev_b, prev_c = self.assign_first_row(config, layouter)
        cells = [a_cell, prev_b, prev_c]
        for _ in range(self.nrows - 1):
            with layouter.namespace("next row"):
                c_cell = self.assign_row(config, layouter, prev_b, prev_c)
            cells.append(c_cell)
            prev_b, prev_c = prev_c, c_cell
        return cells


class FibonacciPublicRowsCircuit(FibonacciRowsCircuit):
    """3열 피보나치 회로 + 공개 입력 [f(0), f(1), 출력]."""

    @classmethod
    def configure(cls, cs):
        config = super().configure(cs)
        instance = cs.instance_column("public")
        cs.enable_equality(instance)
        config.instance = instance
        return config

    def expose_public(self, config, layouter, cell, row):
        """할당된 셀을 instance 열의 row 행과 같도록 묶는다."""
        layouter.constrain_instance(cell, config.instance, row)

    def synthesize(self, config, layouter):
        cells = self.assign_rows(config, layouter)
        self.expose_public(config, layouter, cells[0], 0)
        self.expose_public(config, layouter, cells[1], 1)
        self.expose_public(config, layouter, cells[-1], 2)
        self.output = cells[-1]


# ─────────────────────────────────────────────────────────────────────
# 3. 단일 열 회로
# ─────────────────────────────────────────────────────────────────────

class FiboColumnConfig:
    """단일 열 회로의 config."""

    def __init__(self, advice, selector, instance):
        self.advice = advice
        self.selector = selector
        self.instance = instance


class FibonacciColumnCircuit(Circuit):
    """advice 열 하나에 수열 전체를 쓰는 피보나치 회로.

    위트니스는 모두 공개 입력에서 유도되므로 회로 자체는 값을 갖지 않는다.

    Args:
        nrows: 테이블에 쓰는 행 수 (기본값 10 → f(0)..f(9))
    """

    def __init__(self, nrows=10):
        if nrows < 4:
            raise ValueError(f"nrows는 4 이상이어야 합니다: {nrows}")
        self.nrows = nrows

    @classmethod
    def configure(cls, cs):
        advice = cs.advice_column("a")
        instance = cs.instance_column("public")
        selector = cs.selector("s_add")

        cs.enable_equality(advice)
        cs.enable_equality(instance)

        cs.add_gate("add", selector, advice.cur() + advice.next() - advice.rot(2))
        return FiboColumnConfig(advice, selector, instance)

    def assign(self, config, layouter):
        """영역 하나에 f(0)..f(nrows-1)을 할당하고 마지막 셀을 반환한다."""
        nrows = self.nrows
        with layouter.region("entire fibonacci table") as region:
            config.selector.enable(region, 0)
            config.selector.enable(region, 1)

            a_cell = region.assign_advice_from_instance(
                "f(0)", config.instance, 0, config.advice, 0
            )
            b_cell = region.assign_advice_from_instance(
                "f(1)", config.instance, 1, config.advice, 1
            )

            for row in range(2, nrows):
                # 마지막 두 행은 게이트가 아래 행을 쿼리할 수 없으므로 끈다
                if row < nrows - 2:
                    config.selector.enable(region, row)
                c_cell = region.assign_advice(
                    "advice", config.advice, row, a_cell.value + b_cell.value
                )
                a_cell, b_cell = b_cell, c_cell
        return b_cell

    def synthesize(self, config, layouter):
        with layouter.namespace("entire table"):
            out_cell = self.assign(config, layouter)
        layouter.constrain_instance(out_cell, config.instance, 2)
        self.output = out_cell
