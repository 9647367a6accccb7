"""
PLONKish 공유 유틸리티
======================

테이블 크기 파라미터 k와 관련된 계산을 모은다.

**크기 파라미터 k**:
  테이블 높이는 항상 n = 2^k 이다. k는 회로 내용에서 유도되지 않고
  회로를 사용하는 애플리케이션이 지정하는 외부 설정값이다.
  레이아웃이 2^k 행을 넘으면 테이블을 늘리지 않고 오류를 낸다.
"""

from plonkish.circuit.field import MAX_K


def validate_k(k):
    """크기 파라미터 k를 검증한다.

    Args:
        k: 테이블 높이 지수 (1 ≤ k ≤ MAX_K)

    Returns:
        int: 검증된 k

    Raises:
        ValueError: 정수가 아니거나 범위를 벗어날 때
    """
    if isinstance(k, bool) or not isinstance(k, int):
        raise ValueError(f"k는 정수여야 합니다: {k!r}")
    if k < 1 or k > MAX_K:
        raise ValueError(f"k는 1 이상 {MAX_K} 이하여야 합니다: {k}")
    return k


def table_height(k):
    """테이블 높이 n = 2^k를 반환한다.

    예시:
        >>> table_height(4)  # 16
    """
    return 1 << validate_k(k)


def next_power_of_2(n):
    """n 이상의 가장 작은 2의 거듭제곱을 반환한다.

    예시:
        >>> next_power_of_2(3)  # 4
        >>> next_power_of_2(4)  # 4
        >>> next_power_of_2(5)  # 8
    """
    if n <= 1:
        return 1
    p = 1
    while p < n:
        p <<= 1
    return p


def minimum_k(rows):
    """rows개의 행을 담을 수 있는 가장 작은 k를 반환한다.

    예시:
        >>> minimum_k(9)   # 4 (16행)
        >>> minimum_k(16)  # 4
        >>> minimum_k(17)  # 5
    """
    k = max(next_power_of_2(rows).bit_length() - 1, 1)
    return validate_k(k)
