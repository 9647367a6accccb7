"""
MockProver — 증명 없이 회로를 검사한다
=====================================

실제 증명 백엔드 없이, 위트니스 테이블을 만들어 모든 제약을 직접
평가한다. 회로 작성 중 "이 위트니스가 회로를 만족하는가?"를 빠르게
확인하는 용도이다.

사용 예시:
    >>> prover = MockProver.run(4, FibonacciColumnCircuit(), [[1, 1, 55]])
    >>> prover.verify()           # [] (실패 없음)
    >>> prover.assert_satisfied()  # 실패하면 UnsatisfiedConstraintError
"""

from plonkish.circuit.checker import verify_table
from plonkish.circuit.errors import UnsatisfiedConstraintError
from plonkish.circuit.layouter import Phase
from plonkish.circuit.planner import LinearPlanner
from plonkish.circuit.synthesis import _run


class MockProver:
    """WitnessTable 하나를 검사하는 모의 Prover."""

    def __init__(self, table):
        self.table = table

    @classmethod
    def run(cls, k, circuit, instances=(), planner=LinearPlanner):
        """위트니스 단계를 실행한다. 제약 검사는 verify()에서 한다.

        배치/할당 오류(CellCollisionError 등)는 그대로 전파된다.
        """
        table = _run(k, circuit, Phase.WITNESS, instances, planner)
        return cls(table)

    def verify(self):
        """실패 목록을 반환한다 (모두 만족하면 빈 목록)."""
        return verify_table(self.table)

    def assert_satisfied(self):
        """실패가 있으면 UnsatisfiedConstraintError를 낸다."""
        failures = self.verify()
        if failures:
            raise UnsatisfiedConstraintError(failures)
