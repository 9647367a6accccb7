"""
값 래퍼: 알려진 값(known) / 보류된 값(unknown)
==============================================

같은 할당 로직이 키 생성 단계와 위트니스 단계에서 모두 실행된다.
키 생성 단계에는 위트니스 값이 없으므로, 셀 값은 "알려짐" 또는
"보류됨" 두 상태 중 하나를 갖는 Value로 전달된다.

  - Value.known(x):  x를 가진 값
  - Value.unknown(): 값 없음. 어떤 연산을 해도 결과가 unknown

두 단계의 제어 흐름이 동일하므로 영역 배치도 동일하게 유지된다.

사용 예시:
    >>> a = Value.known(1)
    >>> b = Value.known(2)
    >>> (a + b).evaluate()       # FR(3)
    >>> (a + Value.unknown()).is_known()  # False
"""

from plonkish.circuit.errors import WitnessMissingError
from plonkish.circuit.field import FR, to_fr


class Value:
    """알려진 FR 원소 또는 보류된 값."""

    def __init__(self, inner=None, known=False):
        self._inner = inner
        self._known = known

    @classmethod
    def known(cls, value):
        """알려진 값을 만든다. int는 FR로 변환된다."""
        if isinstance(value, Value):
            return value
        return cls(to_fr(value), True)

    @classmethod
    def unknown(cls):
        """보류된 값을 만든다."""
        return cls(None, False)

    @classmethod
    def wrap(cls, value):
        """Value는 그대로, None은 unknown, 나머지는 known으로 감싼다."""
        if isinstance(value, Value):
            return value
        if value is None:
            return cls.unknown()
        return cls.known(value)

    def is_known(self):
        return self._known

    def map(self, fn):
        """알려진 값에 fn을 적용한다. unknown이면 unknown을 반환한다."""
        if not self._known:
            return Value.unknown()
        return Value.known(fn(self._inner))

    def zip(self, other):
        """두 값을 튜플로 묶는다. 하나라도 unknown이면 unknown."""
        other = Value.wrap(other)
        if not (self._known and other._known):
            return Value.unknown()
        return Value((self._inner, other._inner), True)

    def evaluate(self):
        """알려진 값을 반환한다. unknown이면 None."""
        return self._inner if self._known else None

    def assign(self, name=None):
        """셀에 할당할 값을 꺼낸다.

        Raises:
            WitnessMissingError: 값이 보류된 상태일 때
        """
        if not self._known:
            raise WitnessMissingError(name)
        return self._inner

    def _combine(self, other, op):
        other = Value.wrap(other)
        if not (self._known and other._known):
            return Value.unknown()
        return Value.known(op(self._inner, other._inner))

    def __add__(self, other):
        return self._combine(other, lambda x, y: x + y)

    def __radd__(self, other):
        return Value.wrap(other)._combine(self, lambda x, y: x + y)

    def __sub__(self, other):
        return self._combine(other, lambda x, y: x - y)

    def __rsub__(self, other):
        return Value.wrap(other)._combine(self, lambda x, y: x - y)

    def __mul__(self, other):
        return self._combine(other, lambda x, y: x * y)

    def __rmul__(self, other):
        return Value.wrap(other)._combine(self, lambda x, y: x * y)

    def __neg__(self):
        return self.map(lambda x: -x)

    def __eq__(self, other):
        if not isinstance(other, Value):
            return NotImplemented
        return self._known == other._known and self._inner == other._inner

    __hash__ = None

    def __repr__(self):
        if not self._known:
            return "Value(unknown)"
        if isinstance(self._inner, FR):
            return f"Value({int(self._inner)})"
        return f"Value({self._inner!r})"
