"""
두 단계 할당 드라이버 (Synthesis Driver)
========================================

같은 할당 로직을 같은 CircuitSchema 위에서 두 번 실행한다.

  ┌─────────────────────────────────────────────────────┐
  │  compile_circuit(MyCircuit)                          │
  │    configure(cs) → CircuitSchema + config  (1회)     │
  ├─────────────────────────────────────────────────────┤
  │  keygen(k, circuit)                                  │
  │    synthesize(config, Layouter(KEYGEN))              │
  │    → CircuitLayout: 고정 열, 셀렉터, 배치, 복사 제약  │
  ├─────────────────────────────────────────────────────┤
  │  synthesize_witness(k, circuit, instances)           │
  │    synthesize(config, Layouter(WITNESS))             │
  │    → WitnessTable (+ 레이아웃 일치 검사, 제약 검사)   │
  └─────────────────────────────────────────────────────┘

두 단계의 영역 순서와 배치는 반드시 같아야 한다. layout을 넘기면
위트니스 단계의 레이아웃을 키 생성 결과와 비교해 다르면
LayoutMismatchError를 낸다.

오류가 나면 패스가 즉시 중단되며 부분 테이블은 반환되지 않는다.

사용 예시:
    >>> layout = keygen(4, FibonacciRowsCircuit(1, 1))
    >>> table = synthesize_witness(4, FibonacciRowsCircuit(1, 1), layout=layout)
"""

import functools
import logging

from plonkish.circuit.checker import verify_table
from plonkish.circuit.constraint_system import ConstraintSystem
from plonkish.circuit.errors import LayoutMismatchError, UnsatisfiedConstraintError
from plonkish.circuit.layouter import Layouter, Phase
from plonkish.circuit.planner import LinearPlanner
from plonkish.circuit.utils import validate_k

logger = logging.getLogger(__name__)


class CompiledCircuit:
    """회로 종류 하나의 확정된 스키마와 config."""

    def __init__(self, schema, config):
        self.schema = schema
        self.config = config


@functools.lru_cache(maxsize=None)
def compile_circuit(circuit_cls):
    """회로 클래스의 스키마 콜백을 실행해 스키마를 확정한다.

    회로 종류마다 한 번만 실행되며, 이후 호출은 같은 결과를 돌려준다.

    Args:
        circuit_cls: Circuit 하위 클래스

    Returns:
        CompiledCircuit
    """
    cs = ConstraintSystem()
    config = circuit_cls.configure(cs)
    schema = cs.finalize()
    logger.debug("compiled %s: %r", circuit_cls.__name__, schema)
    return CompiledCircuit(schema, config)


def compile_schema(circuit):
    """회로 (인스턴스 또는 클래스)의 CircuitSchema를 반환한다."""
    circuit_cls = circuit if isinstance(circuit, type) else type(circuit)
    return compile_circuit(circuit_cls).schema


def _run(k, circuit, phase, instances, planner):
    validate_k(k)
    compiled = compile_circuit(type(circuit))
    layouter = Layouter(compiled.schema, k, phase, instances, planner())
    logger.debug("%s pass for %s (k=%d)", phase.value, type(circuit).__name__, k)
    circuit.synthesize(compiled.config, layouter)
    return layouter.finish()


def keygen(k, circuit, planner=LinearPlanner):
    """키 생성 단계: 위트니스 없이 레이아웃만 만든다.

    Args:
        k: 크기 파라미터 (테이블 높이 2^k)
        circuit: Circuit 인스턴스 (without_witnesses()가 적용된다)
        planner: 배치 전략 클래스 (패스마다 새 인스턴스를 만든다)

    Returns:
        CircuitLayout
    """
    layout = _run(k, circuit.without_witnesses(), Phase.KEYGEN, None, planner)
    logger.info(
        "keygen finished: %d regions, %d rows used of %d",
        len(layout.regions), layout.used_rows, layout.n,
    )
    return layout


def synthesize_witness(k, circuit, instances=(), planner=LinearPlanner, layout=None):
    """위트니스 단계: 모든 값이 채워진 WitnessTable을 만든다.

    게이트와 복사 제약을 항상 검사하므로 반환된 테이블은 회로를 만족한다.
    실패를 목록으로 받으려면 MockProver를 쓴다.

    Args:
        k: 크기 파라미터
        circuit: 위트니스를 가진 Circuit 인스턴스
        instances: 공개 입력 열마다 값 목록 (열 순서)
        planner: 배치 전략 클래스
        layout: 키 생성 단계의 CircuitLayout (주면 일치 여부를 검사)

    Returns:
        WitnessTable

    Raises:
        LayoutMismatchError: layout과 배치가 다를 때
        UnsatisfiedConstraintError: 제약이 만족되지 않을 때
    """
    table = _run(k, circuit, Phase.WITNESS, instances, planner)

    if layout is not None:
        difference = layout.same_shape(table.layout)
        if difference is not None:
            raise LayoutMismatchError(difference)

    failures = verify_table(table)
    if failures:
        raise UnsatisfiedConstraintError(failures)

    logger.info(
        "witness finished: %d regions, %d copy constraints",
        len(table.regions), len(table.copies),
    )
    return table
