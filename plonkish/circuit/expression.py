"""
게이트 표현식 (Expression AST)
==============================

게이트 제약식은 (열, 회전) 쿼리 위의 다항식이다.

  s · (a + b - c) = 0
  └┬┘  └───┬───┘
   │       └── Query(a, cur) + Query(b, cur) - Query(c, cur)
   └── Query(s, cur)

표현식은 절대 행을 전혀 모른다. 평가할 때 "쿼리 → 값" 해석 함수를
주입받아, 영역 배치가 끝난 테이블의 특정 행에서 값을 계산한다.

  expr.evaluate(lambda q: table.value(q.column, row + q.rotation.offset))

**노드 종류**:
  - Constant(value):      FR 상수
  - Query(column, rot):   열 쿼리 (리프)
  - Sum([e₀, e₁, ...]):   합
  - Product([e₀, ...]):   곱
  - Negated(e):           -e
  - Scaled(e, k):         k · e
"""

from plonkish.circuit.field import FR, to_fr


def to_expression(value):
    """int / FR / Expression을 Expression으로 변환한다."""
    if isinstance(value, Expression):
        return value
    return Constant(value)


class Expression:
    """모든 표현식 노드의 기반 클래스."""

    def __add__(self, rhs):
        return Sum([self, to_expression(rhs)])

    def __radd__(self, lhs):
        return Sum([to_expression(lhs), self])

    def __sub__(self, rhs):
        return Sum([self, Negated(to_expression(rhs))])

    def __rsub__(self, lhs):
        return Sum([to_expression(lhs), Negated(self)])

    def __mul__(self, rhs):
        if isinstance(rhs, Expression):
            return Product([self, rhs])
        return Scaled(self, rhs)

    def __rmul__(self, lhs):
        return Scaled(self, lhs)

    def __neg__(self):
        return Negated(self)

    def evaluate(self, resolve):
        """표현식을 평가한다.

        Args:
            resolve: Query → FR 함수 (행 해석 함수)

        Returns:
            FR
        """
        raise NotImplementedError

    def children(self):
        return ()

    def queries(self):
        """표현식 안의 모든 쿼리를 처음 등장한 순서대로 중복 없이 반환한다."""
        seen = set()
        result = []
        stack = [self]
        while stack:
            node = stack.pop()
            if isinstance(node, Query):
                key = (node.column, node.rotation)
                if key not in seen:
                    seen.add(key)
                    result.append(node)
            else:
                stack.extend(reversed(node.children()))
        return result

    def degree(self):
        raise NotImplementedError


class Constant(Expression):
    """FR 상수."""

    def __init__(self, value):
        self.value = to_fr(value)

    def evaluate(self, resolve):
        return self.value

    def degree(self):
        return 0

    def __str__(self):
        return str(int(self.value))


class Query(Expression):
    """(열, 회전) 쿼리. 표현식 트리의 리프."""

    def __init__(self, column, rotation):
        self.column = column
        self.rotation = rotation

    def evaluate(self, resolve):
        return resolve(self)

    def degree(self):
        return 1

    def __str__(self):
        offset = self.rotation.offset
        if offset == 0:
            return self.column.name
        return f"{self.column.name}[{offset:+d}]"


class Sum(Expression):
    """합 노드."""

    def __init__(self, terms):
        self.terms = list(terms)

    def __add__(self, rhs):
        return Sum(self.terms + [to_expression(rhs)])

    def __sub__(self, rhs):
        return Sum(self.terms + [Negated(to_expression(rhs))])

    def evaluate(self, resolve):
        total = FR(0)
        for term in self.terms:
            total = total + term.evaluate(resolve)
        return total

    def children(self):
        return tuple(self.terms)

    def degree(self):
        return max((t.degree() for t in self.terms), default=0)

    def __str__(self):
        out = ""
        for i, term in enumerate(self.terms):
            if isinstance(term, Negated):
                out += "-" if i == 0 else " - "
                out += str(term.inner)
            else:
                if i > 0:
                    out += " + "
                out += str(term)
        return f"({out})"


class Product(Expression):
    """곱 노드."""

    def __init__(self, factors):
        self.factors = list(factors)

    def __mul__(self, rhs):
        if isinstance(rhs, Expression):
            return Product(self.factors + [rhs])
        return Scaled(self, rhs)

    def evaluate(self, resolve):
        result = FR(1)
        for factor in self.factors:
            result = result * factor.evaluate(resolve)
        return result

    def children(self):
        return tuple(self.factors)

    def degree(self):
        return sum(f.degree() for f in self.factors)

    def __str__(self):
        return " * ".join(str(f) for f in self.factors)


class Negated(Expression):
    """부호 반전 노드."""

    def __init__(self, inner):
        self.inner = inner

    def __neg__(self):
        return self.inner

    def evaluate(self, resolve):
        return -self.inner.evaluate(resolve)

    def children(self):
        return (self.inner,)

    def degree(self):
        return self.inner.degree()

    def __str__(self):
        return f"(-{self.inner})"


class Scaled(Expression):
    """상수배 노드: factor · inner."""

    def __init__(self, inner, factor):
        self.inner = inner
        self.factor = to_fr(factor)

    def evaluate(self, resolve):
        return self.factor * self.inner.evaluate(resolve)

    def children(self):
        return (self.inner,)

    def degree(self):
        return self.inner.degree()

    def __str__(self):
        return f"{int(self.factor)} * {self.inner}"
