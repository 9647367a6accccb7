"""
PLONKish 기반 모듈: 유한체(Finite Field)
========================================

회로 테이블의 모든 셀 값은 bn128 스칼라 필드 FR의 원소이다.

**유한체 FR**:
  bn128 타원곡선의 스칼라 필드 (scalar field).
  - 위수(order) p ≈ 2^254, 소수체(prime field)
  - p - 1 = 2^28 × m (m은 홀수) → 백엔드가 사용할 수 있는 최대 도메인은 2^28

테이블 높이 2^k는 백엔드의 평가 도메인과 일치해야 하므로
k의 상한(MAX_K)도 이 2-adicity에서 결정된다.

사용 예시:
    >>> from plonkish.circuit.field import FR, to_fr
    >>> a = FR(3)
    >>> b = to_fr(-1)   # FR(p - 1)
    >>> a + b           # FR(2)
"""

from py_ecc.fields import bn128_FQ as FQ
from py_ecc import bn128


class FR(FQ):
    """bn128 스칼라 필드 위의 유한체 원소.

    py_ecc의 FQ 클래스를 상속하여 +, -, *, /, ** 등의 필드 연산을 제공한다.

    예시:
        >>> x = FR(3)
        >>> x * x          # FR(9)
        >>> FR(-1) + 1     # FR(0)
    """
    field_modulus = bn128.curve_order


# 곡선 위수 (필드 크기)
CURVE_ORDER = bn128.curve_order

# p - 1 = 2^28 × m → 2^28차 단위근까지만 존재
TWO_ADICITY = 28
MAX_K = TWO_ADICITY


def to_fr(value):
    """정수 또는 FR 원소를 FR로 변환한다.

    Args:
        value: int 또는 FR (음수는 모듈러 축약된다)

    Returns:
        FR

    Raises:
        TypeError: 정수로 해석할 수 없는 값 (bool 포함)
    """
    if isinstance(value, FR):
        return value
    if isinstance(value, FQ):
        return FR(int(value))
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"FR로 변환할 수 없는 값입니다: {value!r}")
    return FR(value)
