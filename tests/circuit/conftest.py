import pytest

from plonkish.circuit.fibonacci import (
    FibonacciColumnCircuit,
    FibonacciPublicRowsCircuit,
    FibonacciRowsCircuit,
)
from plonkish.circuit.synthesis import keygen, synthesize_witness


# ── 테스트 상수 ──
K = 4
SEED_A = 1
SEED_B = 1
OUTPUT = 55
PUBLIC_INPUTS = [[SEED_A, SEED_B, OUTPUT]]


@pytest.fixture(scope="module")
def rows_data():
    """3열 피보나치 회로의 레이아웃과 위트니스 테이블."""
    layout = keygen(K, FibonacciRowsCircuit(SEED_A, SEED_B))
    table = synthesize_witness(K, FibonacciRowsCircuit(SEED_A, SEED_B), layout=layout)
    return {"layout": layout, "table": table}


@pytest.fixture(scope="module")
def public_rows_data():
    """공개 입력이 있는 3열 피보나치 회로."""
    layout = keygen(K, FibonacciPublicRowsCircuit(SEED_A, SEED_B))
    table = synthesize_witness(
        K, FibonacciPublicRowsCircuit(SEED_A, SEED_B), PUBLIC_INPUTS, layout=layout
    )
    return {"layout": layout, "table": table}


@pytest.fixture(scope="module")
def column_data():
    """단일 열 피보나치 회로."""
    layout = keygen(K, FibonacciColumnCircuit())
    table = synthesize_witness(K, FibonacciColumnCircuit(), PUBLIC_INPUTS, layout=layout)
    return {"layout": layout, "table": table}
